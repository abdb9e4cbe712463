"""
Live browser execution.
"""
from .test_runner import LiveTestRunner, BrowserFactory

__all__ = [
    'LiveTestRunner',
    'BrowserFactory',
]
