"""
Domain entities and value objects.
"""
from .test_case import (
    TestStatus,
    Priority,
    TestStep,
    UserEdit,
    ClarifyingQuestion,
    TestCase,
    renumber,
    merge_test_cases
)
from .task import WorkItem
from .descriptors import (
    ActionKind,
    VerificationKind,
    Navigate,
    Click,
    Fill,
    Select,
    Wait,
    UnclassifiedAction,
    Visible,
    ContainsText,
    UrlMatches,
    Unverified,
    ActionDescriptor,
    VerificationDescriptor
)
from .execution import ExecutionStatus, ExecutionError, ExecutionResult, aggregate_status
from .memory import (
    UserCorrection,
    AppMemoryProfile,
    ProcessedTask,
    UserPreferences,
    MemorySnapshot
)
from .scenario import AppProfile, Scenario
