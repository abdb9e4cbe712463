"""
Interfaces for dependency inversion following SOLID principles.

This module exports all interface contracts used throughout the application.
External dependencies should depend on these abstractions, not concrete implementations.
"""
from .repository import ITaskRepository
from .memory_store import IMemoryStore
from .reviewer import IReviewer, ReviewAction, ReviewDecision

__all__ = [
    # Repository interfaces
    'ITaskRepository',
    # Memory
    'IMemoryStore',
    # Review
    'IReviewer',
    'ReviewAction',
    'ReviewDecision',
]
