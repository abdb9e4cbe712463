"""
Memory store interface.

The store is passed explicitly into the pipeline: callers open it at the start
of a run and flush it at the end.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from core.domain.memory import (
    AppMemoryProfile,
    MemorySnapshot,
    ProcessedTask,
    UserCorrection,
    UserPreferences
)


class IMemoryStore(ABC):
    """Interface for the per-user memory of profiles, corrections and preferences."""

    @abstractmethod
    def open(self) -> MemorySnapshot:
        """Load memory, falling back to an empty snapshot if it cannot be read."""
        pass

    @abstractmethod
    def flush(self) -> None:
        """Persist the in-memory snapshot."""
        pass

    @abstractmethod
    def get_app_profile(self, app_name: str) -> Optional[AppMemoryProfile]:
        pass

    @abstractmethod
    def set_app_profile(self, app_name: str, profile: AppMemoryProfile) -> None:
        pass

    @abstractmethod
    def get_preference(self, key: str) -> Any:
        pass

    @abstractmethod
    def set_preference(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def get_all_preferences(self) -> UserPreferences:
        pass

    @abstractmethod
    def record_processed_task(self, task: ProcessedTask) -> None:
        pass

    @abstractmethod
    def get_processed_task(self, task_id: int) -> Optional[ProcessedTask]:
        pass

    @abstractmethod
    def record_correction(self, original_text: str, new_text: str, context_label: str) -> UserCorrection:
        """Remember a user edit. Corrections are advisory and never auto-applied."""
        pass

    @abstractmethod
    def get_user_corrections(self) -> List[UserCorrection]:
        """All corrections, most frequent first."""
        pass

    def __enter__(self) -> 'IMemoryStore':
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()
