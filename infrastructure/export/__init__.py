"""
Export infrastructure implementations.

Provides output generation for Playwright scripts and scenario reports.
"""
from .playwright_generator import PlaywrightGenerator, sanitize_name
from .scenario_writer import ScenarioWriter

__all__ = [
    'PlaywrightGenerator',
    'ScenarioWriter',
    'sanitize_name',
]
