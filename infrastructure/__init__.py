"""
Infrastructure layer - implementations of interfaces.

Contains:
- ado: Azure DevOps integration (work item source)
- memory: JSON file memory store
- export: Playwright script generator and scenario writer
- browser: Live test runner (Playwright)
- review: Console reviewer
"""
from .ado import (
    ADOHttpClient,
    ADOAuthenticationError,
    ADOTaskRepository,
    HtmlParser
)
from .memory import JsonMemoryStore
from .export import PlaywrightGenerator, ScenarioWriter
from .browser import LiveTestRunner
from .review import ConsoleReviewer

__all__ = [
    # ADO
    'ADOHttpClient',
    'ADOAuthenticationError',
    'ADOTaskRepository',
    'HtmlParser',
    # Memory
    'JsonMemoryStore',
    # Export
    'PlaywrightGenerator',
    'ScenarioWriter',
    # Browser
    'LiveTestRunner',
    # Review
    'ConsoleReviewer',
]
