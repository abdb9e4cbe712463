"""
Work item domain entity.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class WorkItem:
    """Domain entity representing an Azure DevOps work item assigned for QA."""
    id: int
    title: str
    description: str = ""
    acceptance_criteria: str = ""
    state: str = "New"
    url: str = ""
    assigned_to: Optional[str] = None
    iteration_path: Optional[str] = None
    area_path: Optional[str] = None

    def __post_init__(self):
        """Validate work item after initialization."""
        if not self.id:
            raise ValueError("Work item ID cannot be empty")
        if not self.title:
            raise ValueError("Work item title cannot be empty")

    @property
    def has_acceptance_criteria(self) -> bool:
        return bool(self.acceptance_criteria and self.acceptance_criteria.strip())
