"""
Human-in-the-loop review implementations.
"""
from .console_reviewer import ConsoleReviewer

__all__ = [
    'ConsoleReviewer',
]
