"""
Repository interfaces for data access abstraction.

Following the Repository pattern to abstract data access from business logic.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from core.domain.task import WorkItem


class ITaskRepository(ABC):
    """Interface for work item data access."""

    @abstractmethod
    def test_connection(self) -> bool:
        """Check that the tracker is reachable with the configured credentials."""
        pass

    @abstractmethod
    def fetch_assigned(
        self,
        assigned_to: str,
        states: Optional[List[str]] = None,
        max_results: int = 10
    ) -> List[WorkItem]:
        """Retrieve work items assigned to a user.

        Args:
            assigned_to: User the work items are assigned to
            states: Work item states to include
            max_results: Maximum number of items returned

        Returns:
            List of work items, most recently changed first
        """
        pass

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[WorkItem]:
        """Retrieve a single work item by ID.

        Args:
            task_id: The work item ID

        Returns:
            WorkItem if found, None otherwise
        """
        pass
