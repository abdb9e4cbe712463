"""
Reviewer interface - the human in the loop.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from core.domain.test_case import ClarifyingQuestion, TestCase


class ReviewAction(str, Enum):
    APPROVE = "approve"
    EDIT = "edit"
    REGENERATE = "regenerate"
    ADD_STEPS = "add-steps"


@dataclass
class ReviewDecision:
    """Reviewer verdict. `edits` maps zero-based step index to replacement text."""
    action: ReviewAction
    approved: bool = False
    edits: Dict[int, str] = field(default_factory=dict)


class IReviewer(ABC):
    """Interface for reviewing generated test cases."""

    @abstractmethod
    def review_test_cases(self, test_cases: List[TestCase]) -> ReviewDecision:
        pass

    @abstractmethod
    def ask_clarifying_questions(self, questions: List[ClarifyingQuestion]) -> Dict[str, str]:
        """Return answers keyed by question text."""
        pass

    @abstractmethod
    def ask_additional_steps(self) -> List[str]:
        pass

    @abstractmethod
    def confirm(self, message: str) -> bool:
        pass
