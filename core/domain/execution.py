"""
Execution result of a live test run.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ExecutionStatus(str, Enum):
    PASSED = "Passed"
    FAILED = "Failed"
    SKIPPED = "Skipped"


def aggregate_status(passed_steps: int, failed_steps: int) -> ExecutionStatus:
    """Overall run status.

    Failures are tolerated while passes outnumber them: a run is Failed
    only when failed_steps > 0 and failed_steps >= passed_steps.
    """
    if failed_steps == 0:
        return ExecutionStatus.PASSED
    if failed_steps < passed_steps:
        return ExecutionStatus.PASSED
    return ExecutionStatus.FAILED


@dataclass(frozen=True)
class ExecutionError:
    """Failure recorded for one step. Step 0 is the run setup."""
    step_number: int
    message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    screenshot: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'stepId': self.step_number,
            'error': self.message,
            'timestamp': self.timestamp,
        }
        if self.screenshot:
            data['screenshot'] = self.screenshot
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExecutionError':
        return cls(
            step_number=int(data.get('stepId', 0)),
            message=data.get('error', ''),
            timestamp=data.get('timestamp', ''),
            screenshot=data.get('screenshot'),
        )


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one LiveTestRunner run."""
    status: ExecutionStatus
    total_steps: int
    passed_steps: int
    failed_steps: int
    execution_time_ms: int
    skipped_steps: int = 0
    errors: List[ExecutionError] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Percentage of passed steps (0 for an empty run)."""
        if self.total_steps == 0:
            return 0.0
        return round(self.passed_steps / self.total_steps * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'status': self.status.value,
            'totalSteps': self.total_steps,
            'passedSteps': self.passed_steps,
            'failedSteps': self.failed_steps,
            'skippedSteps': self.skipped_steps,
            'executionTime': self.execution_time_ms,
            'timestamp': self.timestamp,
        }
        if self.errors:
            data['errors'] = [error.to_dict() for error in self.errors]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExecutionResult':
        return cls(
            status=ExecutionStatus(data.get('status', ExecutionStatus.SKIPPED.value)),
            total_steps=int(data.get('totalSteps', 0)),
            passed_steps=int(data.get('passedSteps', 0)),
            failed_steps=int(data.get('failedSteps', 0)),
            skipped_steps=int(data.get('skippedSteps', 0)),
            execution_time_ms=int(data.get('executionTime', 0)),
            timestamp=data.get('timestamp', ''),
            errors=[ExecutionError.from_dict(e) for e in data.get('errors') or []],
        )
