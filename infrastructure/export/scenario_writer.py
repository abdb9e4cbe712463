"""
Scenario Writer

Persists scenarios as JSON files and renders them as Markdown or HTML reports.
"""
import json
import os
from html import escape
from typing import List, Optional

from core.domain.scenario import Scenario
from core.domain.test_case import TestCase
from core.services.metrics.logger import StructuredLogger, get_logger

from .playwright_generator import sanitize_name


SCENARIO_SUFFIX = ".scenario.json"


class ScenarioWriter:
    """Reads and writes <scenario>.scenario.json files in one directory."""

    def __init__(self, scenarios_path: str = "./scenarios", logger: Optional[StructuredLogger] = None):
        self.scenarios_path = scenarios_path
        self.logger = logger or get_logger()

    def get_file_name(self, scenario_id: str) -> str:
        return f"{sanitize_name(scenario_id)}{SCENARIO_SUFFIX}"

    def _path(self, scenario_id: str) -> str:
        return os.path.join(self.scenarios_path, self.get_file_name(scenario_id))

    def write(self, scenario: Scenario) -> str:
        """Write a scenario file. Returns its path."""
        os.makedirs(self.scenarios_path, exist_ok=True)
        file_path = self._path(scenario.scenario_id)
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(scenario.to_dict(), f, indent=2, ensure_ascii=False)
        return file_path

    def read(self, scenario_id: str) -> Optional[Scenario]:
        """Read a scenario by ID; None when missing or unreadable."""
        file_path = self._path(scenario_id)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return Scenario.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            self.logger.warning("scenario_read_failed", path=file_path, error=str(e))
            return None

    def list(self) -> List[Scenario]:
        """All readable scenarios, ordered by file name."""
        if not os.path.isdir(self.scenarios_path):
            return []

        scenarios = []
        for file_name in sorted(os.listdir(self.scenarios_path)):
            if not file_name.endswith(SCENARIO_SUFFIX):
                continue
            file_path = os.path.join(self.scenarios_path, file_name)
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    scenarios.append(Scenario.from_dict(json.load(f)))
            except (OSError, ValueError) as e:
                self.logger.warning("scenario_read_failed", path=file_path, error=str(e))
        return scenarios

    def delete(self, scenario_id: str) -> bool:
        file_path = self._path(scenario_id)
        if not os.path.exists(file_path):
            return False
        os.remove(file_path)
        return True

    def generate_summary_report(self, scenario: Scenario) -> str:
        """Render a scenario as Markdown."""
        lines = [
            f"# Scenario Report: {scenario.task_title}",
            "",
            "## Overview",
            f"- **Scenario ID**: {scenario.scenario_id}",
            f"- **Task ID**: {scenario.task_id}",
            f"- **Created**: {scenario.created_at}",
            f"- **Last Updated**: {scenario.updated_at}",
            "",
            "## Task Description",
            scenario.task_description or "None",
            "",
            f"## Test Cases ({len(scenario.test_cases)})",
        ]
        for test_case in scenario.test_cases:
            lines.extend(self._test_case_markdown(test_case))

        lines.extend(["", "## Automation Approach", scenario.automation_approach, "", "## Tested URLs"])
        lines.extend([f"- {url}" for url in scenario.tested_urls] or ["None"])

        lines.extend(["", "## Application Profile"])
        profile = scenario.application_profile
        if profile:
            lines.extend([
                f"- **Name**: {profile.name}",
                f"- **Base URL**: {profile.base_url}",
                f"- **Login Method**: {profile.login_method}",
                f"- **Environment**: {profile.environment}",
            ])
        else:
            lines.append("None")

        lines.extend(["", "## Execution Results"])
        results = scenario.execution_results
        if results:
            lines.extend([
                f"- **Status**: {results.status.value}",
                f"- **Total Steps**: {results.total_steps}",
                f"- **Passed**: {results.passed_steps}",
                f"- **Failed**: {results.failed_steps}",
                f"- **Skipped**: {results.skipped_steps}",
                f"- **Duration**: {results.execution_time_ms}ms",
            ])
            for error in results.errors:
                lines.append(f"  - Step {error.step_number}: {error.message}")
        else:
            lines.append("Not executed")

        lines.extend(["", "## Notes", scenario.notes or "None", ""])
        return "\n".join(lines)

    @staticmethod
    def _test_case_markdown(test_case: TestCase) -> List[str]:
        lines = [
            "",
            f"### {test_case.title}",
            f"- **ID**: {test_case.id}",
            f"- **Status**: {test_case.status.value}",
            f"- **Priority**: {test_case.priority.value}",
            "",
            "**Preconditions**:",
        ]
        lines.extend([f"- {p}" for p in test_case.preconditions] or ["None"])
        lines.extend(["", "**Steps**:"])
        for step in test_case.steps:
            line = f"{step.step_number}. {step.action}"
            if step.expected_result:
                line += f" (Expected: {step.expected_result})"
            lines.append(line)
        lines.extend(["", f"**Expected Outcome**: {test_case.expected_outcome}"])
        if test_case.user_edits:
            lines.extend(["", "**User Edits**:"])
            lines.extend(
                f'- Step {edit.step_index}: Changed from "{edit.original_text}" to "{edit.edited_text}"'
                for edit in test_case.user_edits
            )
        return lines

    def export_as_html(self, scenario: Scenario) -> str:
        """Render a scenario as a standalone HTML page. All text is escaped."""
        parts = [
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            f"  <title>QA Automation Scenario - {escape(scenario.task_title)}</title>",
            "  <style>",
            "    body { font-family: Arial, sans-serif; margin: 20px; }",
            "    h2 { color: #666; border-bottom: 2px solid #007acc; padding-bottom: 5px; }",
            "    .scenario-meta { background: #f0f0f0; padding: 10px; border-radius: 5px; }",
            "    .test-case { border-left: 4px solid #007acc; padding: 10px; margin: 10px 0; background: #fafafa; }",
            "  </style>",
            "</head>",
            "<body>",
            f"  <h1>{escape(scenario.task_title)}</h1>",
            '  <div class="scenario-meta">',
            f"    <p><strong>Scenario ID:</strong> {escape(scenario.scenario_id)}</p>",
            f"    <p><strong>Task ID:</strong> {scenario.task_id}</p>",
            f"    <p><strong>Created:</strong> {escape(scenario.created_at)}</p>",
            "  </div>",
            "  <h2>Description</h2>",
            f"  <p>{escape(scenario.task_description)}</p>",
            "  <h2>Test Cases</h2>",
        ]
        for test_case in scenario.test_cases:
            parts.extend([
                '  <div class="test-case">',
                f"    <h3>{escape(test_case.title)}</h3>",
                f"    <p><strong>Status:</strong> {escape(test_case.status.value)} | "
                f"<strong>Priority:</strong> {escape(test_case.priority.value)}</p>",
                "    <ol>",
            ])
            parts.extend(f"      <li>{escape(step.action)}</li>" for step in test_case.steps)
            parts.extend([
                "    </ol>",
                f"    <p><strong>Expected Outcome:</strong> {escape(test_case.expected_outcome)}</p>",
                "  </div>",
            ])

        parts.append("  <h2>Execution Results</h2>")
        results = scenario.execution_results
        if results:
            parts.extend([
                f"  <p><strong>Status:</strong> {escape(results.status.value)}</p>",
                f"  <p><strong>Duration:</strong> {results.execution_time_ms}ms</p>",
                f"  <p><strong>Pass Rate:</strong> {results.pass_rate:g}%</p>",
            ])
        else:
            parts.append("  <p>Not executed</p>")

        parts.extend(["</body>", "</html>", ""])
        return "\n".join(parts)
