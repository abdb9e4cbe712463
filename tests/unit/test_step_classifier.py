"""
Unit tests for the step classifier.
"""
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.domain.descriptors import (
    ActionKind,
    Click,
    ContainsText,
    Fill,
    Navigate,
    Select,
    UnclassifiedAction,
    Unverified,
    UrlMatches,
    VerificationKind,
    Visible,
    Wait
)
from core.domain.test_case import TestStep
from core.services.step_classifier import (
    StepClassifier,
    classify_action,
    classify_verification,
    find_url
)


class TestClassifyAction:
    """Test action classification."""

    def test_click(self):
        assert classify_action("user clicks login") == Click(target_label="login")

    def test_click_drops_button_word(self):
        assert classify_action("Click the Submit button") == Click(target_label="Submit")

    def test_click_on(self):
        assert classify_action("Click on 'Save draft'") == Click(target_label="Save draft")

    def test_click_without_target_is_unclassified(self):
        assert isinstance(classify_action("click"), UnclassifiedAction)

    def test_navigate_with_url(self):
        assert classify_action("Navigate to https://example.com/login.") == Navigate(
            url="https://example.com/login"
        )

    def test_navigate_with_path(self):
        assert classify_action("Go to /settings") == Navigate(url="/settings")

    def test_navigate_without_url(self):
        assert classify_action("Visit the home page") == Navigate(url=None)

    def test_fill(self):
        assert classify_action("Enter john@example.com into the Email field") == Fill(
            field="Email", value="john@example.com"
        )

    def test_fill_quoted_value(self):
        assert classify_action('Type "secret" in password') == Fill(field="password", value="secret")

    def test_fill_without_target_is_unclassified(self):
        assert isinstance(classify_action("Enter the details"), UnclassifiedAction)

    def test_select(self):
        assert classify_action("Select Canada from the Country dropdown") == Select(
            option="Canada", dropdown="Country"
        )

    @pytest.mark.parametrize("text,expected", [
        ("wait 2 seconds", 2000),
        ("Wait for 3 s", 3000),
        ("wait 500", 500),
        ("wait 250ms", 250),
        ("wait 1 minute", 60000),
    ])
    def test_wait_durations(self, text, expected):
        assert classify_action(text) == Wait(milliseconds=expected)

    def test_wait_units_are_not_all_seconds(self):
        # Only second units scale by 1000; ms stays as written, minutes scale by 60000
        assert classify_action("wait 1500 milliseconds") == Wait(milliseconds=1500)
        assert classify_action("wait 20ms") == Wait(milliseconds=20)
        assert classify_action("wait 2 mins") == Wait(milliseconds=120000)

    def test_wait_without_duration_waits_for_network(self):
        assert classify_action("Wait for the page to load") == Wait(milliseconds=None)

    def test_priority_navigate_before_click(self):
        assert isinstance(classify_action("Click the link to navigate home"), Navigate)

    def test_keywords_are_case_insensitive(self):
        assert classify_action("CLICK Save") == Click(target_label="Save")

    def test_keyword_must_start_a_word(self):
        assert isinstance(classify_action("Reselect nothing"), UnclassifiedAction)

    @pytest.mark.parametrize("text", ["", "Open the app", "Log out", "12345", "   "])
    def test_total(self, text):
        result = classify_action(text)
        assert result.kind in set(ActionKind)

    def test_none_is_unclassified(self):
        assert isinstance(classify_action(None), UnclassifiedAction)


class TestClassifyVerification:
    """Test expected result classification."""

    def test_visible_subject(self):
        assert classify_verification("dashboard is visible") == Visible(target="dashboard")

    def test_visible_strips_article(self):
        assert classify_verification("The welcome banner should be displayed") == Visible(
            target="welcome banner"
        )

    def test_visible_quoted(self):
        assert classify_verification('A "Saved" label appears') == Visible(target="Saved")

    def test_contains_text(self):
        assert classify_verification('Page shows "Welcome back"') == ContainsText(text="Welcome back")

    def test_contains_plain_text(self):
        assert classify_verification("Header contains Order summary.") == ContainsText(text="Order summary")

    def test_url(self):
        assert classify_verification("User is redirected to /dashboard") == UrlMatches(pattern="/dashboard")

    def test_url_without_value_is_unverified(self):
        assert isinstance(classify_verification("URL changes"), Unverified)

    def test_message_needs_manual_assertion(self):
        result = classify_verification("An error message is returned")
        assert result == Unverified(raw_text="An error message is returned", manual_assertion=True)

    def test_unrecognised(self):
        result = classify_verification("Everything works")
        assert isinstance(result, Unverified)
        assert result.manual_assertion is False

    @pytest.mark.parametrize("text", ["", "visible", "shows", "redirect", None])
    def test_total(self, text):
        assert classify_verification(text).kind in set(VerificationKind)


class TestStepClassifier:

    def setup_method(self):
        self.classifier = StepClassifier()

    def test_step_without_expectation(self):
        action, verification = self.classifier.classify_step(TestStep(1, "Click Save"))
        assert action == Click(target_label="Save")
        assert verification is None

    def test_step_with_expectation(self):
        _, verification = self.classifier.classify_step(
            TestStep(1, "Click Save", expected_result="Saved is visible")
        )
        assert verification == Visible(target="Saved")


class TestFindUrl:

    def test_absolute_url(self):
        assert find_url("open https://example.com/a?b=1, then") == "https://example.com/a?b=1"

    def test_path(self):
        assert find_url("go to /orders/42") == "/orders/42"

    def test_no_url(self):
        assert find_url("nothing here") is None

    def test_slash_inside_word_is_not_a_path(self):
        assert find_url("and/or") is None
