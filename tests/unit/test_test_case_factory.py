"""
Unit tests for TestCaseGenerator.
"""
import sys
from pathlib import Path
from unittest.mock import Mock

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.domain.memory import AppMemoryProfile
from core.domain.task import WorkItem
from core.domain.test_case import TestStatus, TestStep
from core.services.ac_parser import CriteriaParser
from core.services.test_case_factory import (
    DEFAULT_EXPECTED_OUTCOME,
    DEFAULT_PRECONDITIONS,
    TestCaseGenerator
)
from infrastructure.memory import JsonMemoryStore


def _task(criteria="When user clicks login\nThen dashboard is visible", description="Login page"):
    return WorkItem(id=42, title="Login", description=description, acceptance_criteria=criteria)


class TestGenerateFromTask:
    """Test building test cases from work items."""

    def setup_method(self):
        self.generator = TestCaseGenerator(parser=CriteriaParser(logger=Mock()))

    def test_builds_one_test_case(self):
        test_cases = self.generator.generate_from_task(_task(), "portal")

        assert len(test_cases) == 1
        tc = test_cases[0]
        assert tc.id == "TC-42-1"
        assert tc.task_id == 42
        assert tc.title == "Test: Login"
        assert tc.status == TestStatus.DRAFT
        assert tc.preconditions == DEFAULT_PRECONDITIONS
        assert tc.expected_outcome == DEFAULT_EXPECTED_OUTCOME
        assert tc.tags == ["portal", "automated"]
        assert len(tc.steps) == 1

    def test_general_tag_without_app(self):
        tc = self.generator.generate_from_task(_task())[0]
        assert tc.tags == ["general", "automated"]

    def test_missing_criteria_adds_questions_to_description(self):
        tc = self.generator.generate_from_task(_task(criteria=""))[0]

        assert tc.steps[0].action == CriteriaParser.SEED_ACTION
        assert tc.description.startswith("Login page")
        assert "What is the expected outcome?" in tc.description

    def test_generate_from_answers(self):
        answers = {"q1": "Open the cart", "q2": "  ", "q3": "Click Checkout"}
        tc = self.generator.generate_from_answers(_task(criteria=""), answers)[0]
        assert [s.action for s in tc.steps] == ["Open the cart", "Click Checkout"]
        assert [s.step_number for s in tc.steps] == [1, 2]


class TestEnrichment:
    """Test enrichment with an application's common steps."""

    def setup_method(self):
        self.store = JsonMemoryStore("/nonexistent-qa-agent-root", logger=Mock())
        self.store.open()
        self.store.set_app_profile("portal", AppMemoryProfile(
            name="portal", common_steps=["Open login page", "Sign in as admin"]
        ))
        self.generator = TestCaseGenerator(
            memory_store=self.store,
            parser=CriteriaParser(memory_store=self.store, logger=Mock())
        )

    def test_common_steps_prepended(self):
        tc = self.generator.generate_from_task(_task(), "portal")[0]

        assert [s.action for s in tc.steps] == ["Open login page", "Sign in as admin", "user clicks login"]
        assert [s.step_number for s in tc.steps] == [1, 2, 3]
        assert tc.applied_profiles == {"portal"}

    def test_enrich_is_idempotent(self):
        tc = self.generator.generate_from_task(_task(), "portal")[0]
        self.generator.enrich_test_case(tc, "portal")
        self.generator.enrich_test_case(tc, "portal")
        assert len(tc.steps) == 3

    def test_app_without_profile_is_not_marked(self):
        tc = self.generator.generate_from_task(_task(), "other")[0]
        assert len(tc.steps) == 1
        assert tc.applied_profiles == set()


class TestUserEdits:
    """Test applying reviewer edits."""

    def setup_method(self):
        self.store = Mock()
        self.generator = TestCaseGenerator(memory_store=self.store, parser=CriteriaParser(logger=Mock()))
        self.tc = self.generator.generate_from_task(
            _task(criteria="When user clicks login\nWhen user opens settings")
        )[0]

    def test_edit_replaces_action_and_records_correction(self):
        self.generator.apply_user_edits(self.tc, {0: "Click Sign in"})

        assert self.tc.steps[0].action == "Click Sign in"
        assert self.tc.steps[0].step_number == 1
        assert len(self.tc.user_edits) == 1
        assert self.tc.user_edits[0].original_text == "user clicks login"
        self.store.record_correction.assert_called_once_with("user clicks login", "Click Sign in", "Task: 42")

    def test_out_of_range_edits_are_ignored(self):
        self.generator.apply_user_edits(self.tc, {5: "x", -1: "y"})
        assert self.tc.user_edits == []
        self.store.record_correction.assert_not_called()

    def test_blank_edit_is_ignored(self):
        self.generator.apply_user_edits(self.tc, {0: "   ", 1: ""})

        assert self.tc.steps[0].action == "user clicks login"
        assert self.tc.user_edits == []
        self.store.record_correction.assert_not_called()

    def test_unchanged_edit_is_ignored(self):
        self.generator.apply_user_edits(self.tc, {1: "user opens settings"})
        assert self.tc.user_edits == []

    def test_add_steps(self):
        self.generator.add_steps(self.tc, ["Click Logout", " "])
        assert [s.step_number for s in self.tc.steps] == [1, 2, 3]
        assert self.tc.steps[-1].action == "Click Logout"

    def test_merge_single(self):
        assert self.generator.merge([self.tc]) is self.tc

    def test_merge_keeps_numbering_contiguous(self):
        other = self.generator.generate_from_task(_task())[0]
        merged = self.generator.merge([self.tc, other])
        assert [s.step_number for s in merged.steps] == [1, 2, 3]
        assert isinstance(merged.steps[0], TestStep)
