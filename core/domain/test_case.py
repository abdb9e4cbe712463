"""
Test Case domain entity.

Holds the intermediate step representation shared by the script generator
and the live runner, plus the two operations that keep step numbering
contiguous (renumber, merge).
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class TestStatus(str, Enum):
    """Review lifecycle of a test case."""
    DRAFT = "Draft"
    REVIEWED = "Reviewed"
    APPROVED = "Approved"
    IMPLEMENTED = "Implemented"

    @property
    def rank(self) -> int:
        return list(TestStatus).index(self)

    def can_advance_to(self, other: "TestStatus") -> bool:
        """True when moving to `other` keeps the lifecycle moving forward."""
        return other.rank >= self.rank


class Priority(str, Enum):
    """Test case priorities."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


@dataclass
class TestStep:
    """Represents a single test step."""
    step_number: int
    action: str
    expected_result: str = ""
    selector: Optional[str] = None
    value: Optional[str] = None

    def __post_init__(self):
        if self.step_number < 1:
            raise ValueError(f"Step number must be positive, got {self.step_number}")
        if not self.action or not self.action.strip():
            raise ValueError(f"Step {self.step_number}: action cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'stepNumber': self.step_number,
            'action': self.action,
            'expectedResult': self.expected_result,
        }
        if self.selector is not None:
            data['selector'] = self.selector
        if self.value is not None:
            data['value'] = self.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TestStep':
        return cls(
            step_number=int(data.get('stepNumber', 1)),
            action=data.get('action', ''),
            expected_result=data.get('expectedResult', '') or '',
            selector=data.get('selector'),
            value=data.get('value'),
        )


@dataclass(frozen=True)
class UserEdit:
    """A single recorded edit of a step's action text."""
    step_index: int
    original_text: str
    edited_text: str
    timestamp: str
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'stepId': self.step_index,
            'originalText': self.original_text,
            'editedText': self.edited_text,
            'timestamp': self.timestamp,
        }
        if self.reason:
            data['reason'] = self.reason
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserEdit':
        return cls(
            step_index=int(data.get('stepId', 0)),
            original_text=data.get('originalText', ''),
            edited_text=data.get('editedText', ''),
            timestamp=data.get('timestamp', ''),
            reason=data.get('reason'),
        )


@dataclass
class ClarifyingQuestion:
    """Open question raised when criteria are missing or ambiguous."""
    question: str
    context: str
    priority: str = "High"
    suggested_answer: Optional[str] = None


@dataclass
class TestCase:
    """Domain entity representing a test case generated from a work item."""
    id: str
    task_id: int
    title: str
    description: str = ""
    preconditions: List[str] = field(default_factory=list)
    steps: List[TestStep] = field(default_factory=list)
    expected_outcome: str = ""
    status: TestStatus = TestStatus.DRAFT
    user_edits: List[UserEdit] = field(default_factory=list)
    priority: Priority = Priority.HIGH
    tags: List[str] = field(default_factory=list)
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    # Application names whose common steps were already prepended
    applied_profiles: Set[str] = field(default_factory=set)

    def advance_status(self, new_status: TestStatus) -> None:
        """Move the status forward; backwards moves raise ValueError."""
        if not self.status.can_advance_to(new_status):
            raise ValueError(
                f"Cannot move test case {self.id} from {self.status.value} back to {new_status.value}"
            )
        self.status = new_status

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'taskId': self.task_id,
            'title': self.title,
            'description': self.description,
            'preconditions': list(self.preconditions),
            'steps': [step.to_dict() for step in self.steps],
            'expectedOutcome': self.expected_outcome,
            'priority': self.priority.value,
            'tags': list(self.tags),
            'generatedAt': self.generated_at,
            'userEdits': [edit.to_dict() for edit in self.user_edits],
            'status': self.status.value,
            'appliedProfiles': sorted(self.applied_profiles),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TestCase':
        return cls(
            id=data.get('id', ''),
            task_id=int(data.get('taskId', 0)),
            title=data.get('title', ''),
            description=data.get('description', ''),
            preconditions=list(data.get('preconditions') or []),
            steps=[TestStep.from_dict(s) for s in data.get('steps', [])],
            expected_outcome=data.get('expectedOutcome', ''),
            status=TestStatus(data.get('status', TestStatus.DRAFT.value)),
            user_edits=[UserEdit.from_dict(e) for e in data.get('userEdits') or []],
            priority=Priority(data.get('priority', Priority.HIGH.value)),
            tags=list(data.get('tags') or []),
            generated_at=data.get('generatedAt', ''),
            applied_profiles=set(data.get('appliedProfiles') or []),
        )


def renumber(steps: List[TestStep], start: int = 1) -> List[TestStep]:
    """Return copies of `steps` numbered start..start+N-1 in list order."""
    return [replace(step, step_number=start + idx) for idx, step in enumerate(steps)]


def merge_test_cases(test_cases: List[TestCase]) -> TestCase:
    """Concatenate the steps of several test cases into the first one.

    A single test case is returned as-is. Later cases only contribute their
    steps; their own numbering is discarded.
    """
    if not test_cases:
        raise ValueError("No test cases to merge")

    if len(test_cases) == 1:
        return test_cases[0]

    all_steps = [step for tc in test_cases for step in tc.steps]
    first = test_cases[0]
    return replace(
        first,
        steps=renumber(all_steps),
        preconditions=list(first.preconditions),
        user_edits=list(first.user_edits),
        tags=list(first.tags),
        applied_profiles=set(first.applied_profiles),
    )
