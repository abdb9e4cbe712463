"""
Unit tests for the Playwright script generator.
"""
import os
import sys
from pathlib import Path
from unittest.mock import Mock

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.config import AgentConfig, ApplicationConfig, TestGenerationConfig
from core.domain.test_case import TestCase, TestStep
from infrastructure.export.playwright_generator import (
    PlaywrightGenerator,
    sanitize_name,
    ts_string
)


APP = ApplicationConfig(name="portal", base_url="https://portal.example.com")


def _test_case(steps, title="Login works"):
    return TestCase(
        id="TC-7-1",
        task_id=7,
        title=title,
        description="Login flow",
        preconditions=["User is logged in"],
        steps=steps,
        expected_outcome="All steps executed successfully",
    )


class TestHelpers:

    def test_ts_string_escapes_quotes_and_newlines(self):
        assert ts_string("it's\na \\ test") == "it\\'s\\na \\\\ test"

    def test_ts_string_escapes_line_separators(self):
        assert ts_string("a\u2028b\u2029c") == "a\\u2028b\\u2029c"

    def test_sanitize_name(self):
        assert sanitize_name("Login: Works!") == "login_works"

    def test_sanitize_name_empty(self):
        assert sanitize_name("!!!") == "untitled"

    def test_sanitize_name_truncates(self):
        assert len(sanitize_name("x" * 80)) == 50


class TestPlaywrightGenerator:
    """Test script generation."""

    def setup_method(self):
        self.config = AgentConfig(applications=[APP])
        self.generator = PlaywrightGenerator(self.config, logger=Mock())

    def test_structure(self):
        script = self.generator.generate_test(_test_case([TestStep(1, "Click Login")]), APP)

        assert "import { test, expect } from '@playwright/test';" in script
        assert "test.describe('Login works', () => {" in script
        assert "const baseUrl = 'https://portal.example.com';" in script
        assert "test('TC-7-1: Login works', async ({ page }) => {" in script
        assert "// Expected Outcome: All steps executed successfully" in script

    def test_deterministic(self):
        tc = _test_case([
            TestStep(1, "Navigate to /login"),
            TestStep(2, "Enter bob into the username field"),
            TestStep(3, "Click Sign in", expected_result="Dashboard is visible"),
        ])
        assert self.generator.generate_test(tc, APP) == self.generator.generate_test(tc, APP)

    def test_action_templates(self):
        script = self.generator.generate_test(_test_case([
            TestStep(1, "Navigate to /login"),
            TestStep(2, "Enter bob into the username field"),
            TestStep(3, "Select Canada from the Country dropdown"),
            TestStep(4, "Click the Sign in button"),
            TestStep(5, "Wait 2 seconds"),
        ]), APP)

        assert "await page.goto(new URL('/login', baseUrl).toString(), { waitUntil: 'networkidle' });" in script
        assert "await page.fill('input[name=\"username\"]', 'bob');" in script
        assert "await page.selectOption('select[name=\"Country\"]', 'Canada');" in script
        assert "await page.getByRole('button', { name: 'Sign in' }).click();" in script
        assert "await page.waitForTimeout(2000);" in script

    def test_verification_templates(self):
        script = self.generator.generate_test(_test_case([
            TestStep(1, "Click Save", expected_result="Saved is visible"),
            TestStep(2, "Click Next", expected_result='Page shows "Step 2"'),
            TestStep(3, "Click Finish", expected_result="User is redirected to /done"),
        ]), APP)

        assert "await expect(page.getByText('Saved').first()).toBeVisible();" in script
        assert "await expect(page.locator('body')).toContainText('Step 2');" in script
        assert "expect(page.url()).toContain('/done');" in script

    def test_every_step_has_a_block(self):
        steps = [TestStep(i, text) for i, text in enumerate(
            ["Open the app", "Click Save", "Do something odd", "Wait"], start=1
        )]
        script = self.generator.generate_test(_test_case(steps), APP)
        for step in steps:
            assert f"// Step {step.step_number}: {step.action}" in script

    def test_unclassified_action_is_a_todo(self):
        script = self.generator.generate_test(_test_case([TestStep(1, "Open the app")]), APP)
        assert "// Action: Open the app" in script
        assert "// TODO: implement manually" in script

    def test_navigate_without_url_is_a_todo(self):
        script = self.generator.generate_test(_test_case([TestStep(1, "Navigate to the home page")]), APP)
        assert "// Navigate to: Navigate to the home page" in script
        assert "page.goto(new URL" not in script

    def test_unverified_expectation_is_a_todo(self):
        script = self.generator.generate_test(
            _test_case([TestStep(1, "Click Save", expected_result="An error message is returned")]), APP
        )
        assert "// Verify: An error message is returned" in script
        assert "// TODO: add assertion manually (check the message text shown)" in script

    def test_quotes_in_text_are_escaped(self):
        script = self.generator.generate_test(_test_case([TestStep(1, "Click O'Brien's profile")]), APP)
        assert "getByRole('button', { name: 'O\\'Brien\\'s profile' })" in script

    def test_waits_can_be_disabled(self):
        config = AgentConfig(
            applications=[APP],
            test_generation=TestGenerationConfig(include_waits=False)
        )
        script = PlaywrightGenerator(config, logger=Mock()).generate_test(
            _test_case([TestStep(1, "Click Save")]), APP
        )
        assert "waitForLoadState" not in script

    def test_screenshot_line(self):
        config = AgentConfig(
            applications=[APP],
            test_generation=TestGenerationConfig(include_screenshots=True)
        )
        script = PlaywrightGenerator(config, logger=Mock()).generate_test(
            _test_case([TestStep(1, "Click Save")]), APP
        )
        assert "await page.screenshot({ path: './screenshots/login_works.png', fullPage: true });" in script

    def test_default_app_is_used(self):
        script = self.generator.generate_test(_test_case([TestStep(1, "Click Save")]))
        assert "https://portal.example.com" in script

    def test_file_name(self):
        assert self.generator.get_test_file_name(_test_case([], title="Login: Works!")) == "login_works.spec.ts"
        assert self.generator.get_test_file_name(_test_case([], title="???")) == "untitled.spec.ts"

    def test_generate_script_writes_file(self, tmp_path):
        logger = Mock()
        generator = PlaywrightGenerator(self.config, logger=logger)

        path = generator.generate_script(
            _test_case([TestStep(1, "Open the app")]), APP, output_dir=str(tmp_path)
        )

        assert os.path.basename(path) == "login_works.spec.ts"
        assert Path(path).read_text(encoding='utf-8').startswith("// Test Case: TC-7-1")
        logger.log_generation.assert_called_once_with("TC-7-1", path, 1)
