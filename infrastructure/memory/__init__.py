"""
Memory store implementations.
"""
from .json_memory_store import JsonMemoryStore, MEMORY_FILE_NAME

__all__ = [
    'JsonMemoryStore',
    'MEMORY_FILE_NAME',
]
