"""
Playwright Script Generator

Generates Playwright TypeScript test scripts from test cases.
Follows the same export pattern as the scenario writer: build the content
as a list of lines, then write it under the configured output directory.

Generation is deterministic: the same test case and application always give
byte-identical output. Steps the classifier cannot read are emitted as
comments with a TODO marker; no code is invented for them.
"""
import os
import re
from typing import List, Optional

from core.config import AgentConfig, ApplicationConfig
from core.domain.descriptors import (
    ActionDescriptor,
    Click,
    ContainsText,
    Fill,
    Navigate,
    Select,
    Unverified,
    UrlMatches,
    VerificationDescriptor,
    Visible,
    Wait
)
from core.domain.test_case import TestCase, TestStep
from core.services.metrics.logger import StructuredLogger, get_logger
from core.services.step_classifier import StepClassifier


INDENT = "    "
MAX_FILE_NAME_LENGTH = 50


def ts_string(text: str) -> str:
    """Escape text for a single-quoted TypeScript string literal."""
    return (
        (text or "")
        .replace('\\', '\\\\')
        .replace("'", "\\'")
        .replace('\r', '\\r')
        .replace('\n', '\\n')
        .replace('\u2028', '\\u2028')
        .replace('\u2029', '\\u2029')
    )


def css_attr(text: str) -> str:
    """Escape text for a double-quoted CSS attribute value."""
    return (text or "").replace('\\', '\\\\').replace('"', '\\"')


def comment(text: str) -> str:
    """Flatten text onto one line for a // comment."""
    return re.sub(r'\s+', ' ', text or "").strip()


def sanitize_name(name: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to '_', trim and truncate."""
    sanitized = re.sub(r'[^a-z0-9]+', '_', (name or "").lower()).strip('_')
    sanitized = sanitized[:MAX_FILE_NAME_LENGTH].strip('_')
    return sanitized or "untitled"


class PlaywrightGenerator:
    """
    Generates Playwright .spec.ts files from test cases.

    One test.describe block per test case; one commented block per step.
    """

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        classifier: Optional[StepClassifier] = None,
        logger: Optional[StructuredLogger] = None
    ):
        self.config = config or AgentConfig()
        self.classifier = classifier or StepClassifier()
        self.logger = logger or get_logger()

    @property
    def include_waits(self) -> bool:
        return self.config.test_generation.include_waits

    @property
    def include_screenshots(self) -> bool:
        return self.config.test_generation.include_screenshots

    def get_test_file_name(self, test_case: TestCase) -> str:
        return f"{sanitize_name(test_case.title)}.spec.ts"

    def generate_script(
        self,
        test_case: TestCase,
        app: Optional[ApplicationConfig] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """Generate a script and save it. Returns the file path."""
        content = self.generate_test(test_case, app)
        output_dir = output_dir or self.config.paths.tests
        os.makedirs(output_dir, exist_ok=True)

        file_path = os.path.join(output_dir, self.get_test_file_name(test_case))
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

        unclassified = content.count("// TODO: implement manually")
        self.logger.log_generation(test_case.id, file_path, unclassified)
        return file_path

    def generate_test(self, test_case: TestCase, app: Optional[ApplicationConfig] = None) -> str:
        """Generate the script text for one test case."""
        app = app or self.config.get_app()
        title = test_case.title.strip() or "untitled"

        lines = [
            f"// Test Case: {comment(test_case.id)}",
            f"// Task ID: {test_case.task_id}",
            "// Auto-generated Playwright test",
            "",
            "import { test, expect } from '@playwright/test';",
            "",
            f"test.describe('{ts_string(title)}', () => {{",
            f"  const baseUrl = '{ts_string(app.base_url)}';",
            "",
            "  test.beforeEach(async ({ page }) => {",
            "    await page.goto(baseUrl, { waitUntil: 'networkidle' });",
            "  });",
            "",
            f"  test('{ts_string(test_case.id + ': ' + title)}', async ({{ page }}) => {{",
        ]

        if test_case.description.strip():
            lines.append(f"{INDENT}// Description: {comment(test_case.description)}")
        if test_case.preconditions:
            lines.append(f"{INDENT}// Preconditions:")
            lines.extend(f"{INDENT}// - {comment(p)}" for p in test_case.preconditions)
        lines.append("")

        for step in sorted(test_case.steps, key=lambda s: s.step_number):
            lines.extend(self._step_lines(step))
            lines.append("")

        if self.include_screenshots:
            screenshot = f"{self.config.paths.screenshots.rstrip('/')}/{sanitize_name(test_case.title)}.png"
            lines.append(f"{INDENT}await page.screenshot({{ path: '{ts_string(screenshot)}', fullPage: true }});")
            lines.append("")

        lines.extend([
            f"{INDENT}// Expected Outcome: {comment(test_case.expected_outcome)}",
            "  });",
            "});",
            "",
        ])
        return "\n".join(lines)

    def _step_lines(self, step: TestStep) -> List[str]:
        action, verification = self.classifier.classify_step(step)

        lines = [f"{INDENT}// Step {step.step_number}: {comment(step.action)}"]
        lines.extend(INDENT + line for line in self._action_code(action, step.action))

        if verification is not None:
            lines.append(f"{INDENT}// Expected: {comment(step.expected_result)}")
            lines.extend(INDENT + line for line in self._verification_code(verification))
        return lines

    def _action_code(self, action: ActionDescriptor, text: str) -> List[str]:
        if isinstance(action, Navigate):
            if action.url is None:
                return [f"// Navigate to: {comment(text)}", "// TODO: implement manually"]
            if action.url.startswith('/'):
                target = f"new URL('{ts_string(action.url)}', baseUrl).toString()"
            else:
                target = f"'{ts_string(action.url)}'"
            return [f"await page.goto({target}, {{ waitUntil: 'networkidle' }});"]

        if isinstance(action, Click):
            lines = [f"await page.getByRole('button', {{ name: '{ts_string(action.target_label)}' }}).click();"]
            if self.include_waits:
                lines.append("await page.waitForLoadState('networkidle');")
            return lines

        if isinstance(action, Fill):
            selector = f'input[name="{css_attr(action.field)}"]'
            return [f"await page.fill('{ts_string(selector)}', '{ts_string(action.value)}');"]

        if isinstance(action, Select):
            selector = f'select[name="{css_attr(action.dropdown)}"]'
            return [f"await page.selectOption('{ts_string(selector)}', '{ts_string(action.option)}');"]

        if isinstance(action, Wait):
            if action.milliseconds is None:
                return ["await page.waitForLoadState('networkidle');"]
            return [f"await page.waitForTimeout({action.milliseconds});"]

        return [f"// Action: {comment(text)}", "// TODO: implement manually"]

    @staticmethod
    def _verification_code(verification: VerificationDescriptor) -> List[str]:
        if isinstance(verification, Visible):
            return [f"await expect(page.getByText('{ts_string(verification.target)}').first()).toBeVisible();"]

        if isinstance(verification, ContainsText):
            return [f"await expect(page.locator('body')).toContainText('{ts_string(verification.text)}');"]

        if isinstance(verification, UrlMatches):
            return [f"expect(page.url()).toContain('{ts_string(verification.pattern)}');"]

        lines = [f"// Verify: {comment(verification.raw_text)}"]
        if isinstance(verification, Unverified) and verification.manual_assertion:
            lines.append("// TODO: add assertion manually (check the message text shown)")
        else:
            lines.append("// TODO: add assertion manually")
        return lines
