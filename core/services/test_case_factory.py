"""
Factory for building test cases from work items.

Runs the parse -> enrich half of the pipeline and applies reviewer feedback
(edits, added steps) to the resulting test cases.
"""
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from core.domain.task import WorkItem
from core.domain.test_case import (
    ClarifyingQuestion,
    Priority,
    TestCase,
    TestStatus,
    TestStep,
    UserEdit,
    merge_test_cases,
    renumber
)
from core.interfaces.memory_store import IMemoryStore
from core.services.ac_parser import CriteriaParser


DEFAULT_PRECONDITIONS = ['User is logged in', 'Application is accessible']
DEFAULT_EXPECTED_OUTCOME = 'All steps executed successfully'


class TestCaseGenerator:
    """Builds draft test cases for a work item."""

    def __init__(self, memory_store: Optional[IMemoryStore] = None, parser: Optional[CriteriaParser] = None):
        """Initialize generator.

        Args:
            memory_store: Store used for enrichment and for recording corrections
            parser: Criteria parser (one bound to memory_store by default)
        """
        self.memory_store = memory_store
        self.parser = parser or CriteriaParser(memory_store=memory_store)

    def generate_from_task(self, task: WorkItem, app_name: Optional[str] = None) -> List[TestCase]:
        """Generate test cases from a work item's acceptance criteria.

        Clarifying questions raised by the parser are appended to the test
        case description so a reviewer sees them.
        """
        steps, questions = self.parser.parse(
            task.acceptance_criteria,
            task.description,
            task_id=task.id
        )

        test_case = self._build(task, steps, app_name)
        if questions:
            test_case.description += self._questions_note(questions)

        self.enrich_test_case(test_case, app_name)
        return [test_case]

    def generate_from_answers(
        self,
        task: WorkItem,
        answers: Dict[str, str],
        app_name: Optional[str] = None
    ) -> List[TestCase]:
        """Generate test cases from answers to clarifying questions, one step per non-empty answer."""
        steps = []
        for answer in answers.values():
            if answer and answer.strip():
                steps.append(TestStep(step_number=len(steps) + 1, action=answer.strip()))

        test_case = self._build(task, steps, app_name)
        self.enrich_test_case(test_case, app_name)
        return [test_case]

    def enrich_test_case(self, test_case: TestCase, app_name: Optional[str]) -> TestCase:
        """Prepend an application's common steps at most once per test case."""
        if not app_name or app_name in test_case.applied_profiles:
            return test_case

        enriched = self.parser.enrich(test_case.steps, app_name)
        if enriched is not test_case.steps:
            test_case.steps = enriched
            test_case.applied_profiles.add(app_name)
        return test_case

    def apply_user_edits(self, test_case: TestCase, edits: Dict[int, str]) -> TestCase:
        """Replace step actions by zero-based index and remember each change.

        Indexes outside the step list and blank replacements are ignored.
        Every applied edit is appended to the test case's edit history and
        recorded as a correction in the memory store.
        """
        for index, new_text in sorted(edits.items()):
            if index < 0 or index >= len(test_case.steps):
                continue
            if not new_text or not new_text.strip():
                continue

            original = test_case.steps[index]
            if original.action == new_text:
                continue

            test_case.steps[index] = replace(original, action=new_text)
            test_case.user_edits.append(UserEdit(
                step_index=index,
                original_text=original.action,
                edited_text=new_text,
                timestamp=datetime.now().isoformat()
            ))

            if self.memory_store is not None:
                self.memory_store.record_correction(original.action, new_text, f"Task: {test_case.task_id}")

        return test_case

    def add_steps(self, test_case: TestCase, texts: List[str]) -> TestCase:
        """Append reviewer-supplied steps after the existing ones."""
        new_steps = [TestStep(step_number=1, action=text.strip()) for text in texts if text and text.strip()]
        if new_steps:
            test_case.steps = renumber(test_case.steps + new_steps)
        return test_case

    def merge(self, test_cases: List[TestCase]) -> TestCase:
        return merge_test_cases(test_cases)

    @staticmethod
    def _build(task: WorkItem, steps: List[TestStep], app_name: Optional[str]) -> TestCase:
        return TestCase(
            id=f"TC-{task.id}-1",
            task_id=task.id,
            title=f"Test: {task.title}",
            description=task.description,
            preconditions=list(DEFAULT_PRECONDITIONS),
            steps=steps,
            expected_outcome=DEFAULT_EXPECTED_OUTCOME,
            status=TestStatus.DRAFT,
            priority=Priority.HIGH,
            tags=[app_name or 'general', 'automated'],
        )

    @staticmethod
    def _questions_note(questions: List[ClarifyingQuestion]) -> str:
        lines = "\n".join(f"- {q.question}" for q in questions)
        return (
            "\n\nNote: This test case was generated from limited information. "
            f"Please review the following questions:\n{lines}"
        )
