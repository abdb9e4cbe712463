"""
Unit tests for the acceptance criteria parser.
"""
import sys
from pathlib import Path
from unittest.mock import Mock

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.domain.memory import AppMemoryProfile
from core.domain.test_case import TestStep
from core.services.ac_parser import CriteriaParser


class TestParse:
    """Test Given/When/Then parsing."""

    def setup_method(self):
        self.parser = CriteriaParser(logger=Mock())

    def test_when_then_gives_one_step(self):
        steps, questions = self.parser.parse("When user clicks login\nThen dashboard is visible")

        assert len(steps) == 1
        assert steps[0].step_number == 1
        assert steps[0].action == "user clicks login"
        assert steps[0].expected_result == "dashboard is visible"
        assert questions == []

    def test_given_lines_are_discarded(self):
        steps, _ = self.parser.parse("Given the user is logged in\nWhen user opens settings")
        assert [s.action for s in steps] == ["user opens settings"]

    def test_then_after_completed_step_opens_verify_step(self):
        steps, _ = self.parser.parse(
            "When user saves\nThen a toast appears\nThen the list is refreshed"
        )
        assert len(steps) == 2
        assert steps[1].action == "Verify"
        assert steps[1].expected_result == "the list is refreshed"

    def test_and_repeats_previous_role(self):
        steps, _ = self.parser.parse(
            "Given a user\nAnd a cart\n"
            "When user adds an item\nAnd user opens the cart\n"
            "Then the item is listed\nAnd the total is shown"
        )
        assert [s.action for s in steps] == [
            "user adds an item",
            "user opens the cart",
            "Verify",
        ]
        assert steps[1].expected_result == "the item is listed"
        assert steps[2].expected_result == "the total is shown"
        assert [s.step_number for s in steps] == [1, 2, 3]

    def test_plain_lines_become_steps(self):
        steps, _ = self.parser.parse("- Open the page\n- Click Save")
        assert [s.action for s in steps] == ["Open the page", "Click Save"]

    def test_bullets_split_lines(self):
        steps, _ = self.parser.parse("• Open the page • Click Save")
        assert len(steps) == 2

    def test_dash_inside_word_does_not_split(self):
        steps, _ = self.parser.parse("Navigate to https://example.com/sign-in")
        assert len(steps) == 1
        assert steps[0].action == "Navigate to https://example.com/sign-in"

    def test_section_headers_are_skipped(self):
        steps, _ = self.parser.parse("Scenario: Login\n## Notes\nWhen user logs in")
        assert [s.action for s in steps] == ["user logs in"]

    def test_keywords_are_case_insensitive(self):
        steps, _ = self.parser.parse("WHEN user clicks save\nTHEN saved is visible")
        assert len(steps) == 1
        assert steps[0].expected_result == "saved is visible"

    def test_empty_criteria_fall_back_to_description(self):
        steps, questions = self.parser.parse("", fallback_description="Login page")

        assert len(steps) == 1
        assert steps[0].action == CriteriaParser.SEED_ACTION
        assert steps[0].expected_result == CriteriaParser.SEED_EXPECTED
        assert len(questions) == 3
        assert "Login page" in questions[0].context

    def test_headers_only_asks_for_steps(self):
        steps, questions = self.parser.parse("Scenario:\n# Heading")
        assert steps == []
        assert len(questions) == 1
        assert "No clear acceptance criteria" in questions[0].question

    def test_parse_is_logged(self):
        logger = Mock()
        CriteriaParser(logger=logger).parse("When x happens", task_id=42)
        logger.log_parse.assert_called_once_with(42, 1, 0)


class TestDetectIssues:
    """Test the criteria linter."""

    def setup_method(self):
        self.parser = CriteriaParser(logger=Mock())

    def test_short_text_has_three_issues(self):
        assert self.parser.detect_issues("ok") == [
            "too short",
            "lacks clear actions/expectations",
            "not BDD format",
        ]

    def test_well_formed_criteria_have_no_issues(self):
        assert self.parser.detect_issues("When user clicks login then dashboard is shown") == []

    def test_hedging_language(self):
        issues = self.parser.detect_issues("When user clicks save the page might reload")
        assert issues == ["uncertain language"]

    def test_none_is_treated_as_empty(self):
        assert "too short" in self.parser.detect_issues(None)


class TestEnrich:
    """Test prepending an application's common steps."""

    def setup_method(self):
        self.store = Mock()
        self.parser = CriteriaParser(memory_store=self.store, logger=Mock())

    def test_common_steps_come_first(self):
        self.store.get_app_profile.return_value = AppMemoryProfile(
            name="portal", common_steps=["Open login page", "Sign in"]
        )
        steps = [TestStep(1, "Click Save"), TestStep(2, "Click Close"), TestStep(3, "Click Exit")]

        enriched = self.parser.enrich(steps, "portal")

        assert len(enriched) == 5
        assert [s.step_number for s in enriched] == [1, 2, 3, 4, 5]
        assert [s.action for s in enriched[:2]] == ["Open login page", "Sign in"]
        assert enriched[2].action == "Click Save"

    def test_blank_common_steps_are_dropped(self):
        self.store.get_app_profile.return_value = AppMemoryProfile(
            name="portal", common_steps=["Open login page", "  "]
        )

        enriched = self.parser.enrich([TestStep(1, "Click Save")], "portal")

        assert [s.action for s in enriched] == ["Open login page", "Click Save"]
        assert [s.step_number for s in enriched] == [1, 2]

    def test_unknown_app_returns_same_list(self):
        self.store.get_app_profile.return_value = None
        steps = [TestStep(1, "Click Save")]
        assert self.parser.enrich(steps, "unknown") is steps

    def test_without_store_is_a_no_op(self):
        steps = [TestStep(1, "Click Save")]
        assert CriteriaParser(logger=Mock()).enrich(steps, "portal") is steps


class TestClarifyingQuestions:

    def test_three_fixed_questions(self):
        questions = CriteriaParser.clarifying_questions("Checkout")
        assert [q.question for q in questions] == [
            "What is the main feature or action being tested?",
            "What data or inputs are required?",
            "What is the expected outcome?",
        ]
        assert all(q.priority == "High" for q in questions)
