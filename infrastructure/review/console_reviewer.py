"""
Console reviewer - interactive review of generated test cases in a terminal.
"""
from typing import Callable, Dict, List, Optional

from core.domain.test_case import ClarifyingQuestion, TestCase
from core.interfaces.reviewer import IReviewer, ReviewAction, ReviewDecision


REVIEW_CHOICES = {
    'a': ReviewAction.APPROVE,
    'approve': ReviewAction.APPROVE,
    'e': ReviewAction.EDIT,
    'edit': ReviewAction.EDIT,
    'r': ReviewAction.REGENERATE,
    'regenerate': ReviewAction.REGENERATE,
    's': ReviewAction.ADD_STEPS,
    'add-steps': ReviewAction.ADD_STEPS,
}
SKIP_CHOICES = {'k', 'skip'}


class ConsoleReviewer(IReviewer):
    """
    Prompts the user on the console.

    Skipping a task is reported as an approve decision with approved=False.
    """

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print
    ):
        self._input = input_fn
        self._output = output_fn

    def ask(self, prompt: str, default: str = "") -> str:
        answer = self._input(prompt).strip()
        return answer or default

    def confirm(self, message: str) -> bool:
        return self.ask(f"{message} (y/n): ").lower() in ('y', 'yes')

    def show_test_case(self, test_case: TestCase) -> None:
        self._output(f"\n  {test_case.id}: {test_case.title}")
        self._output(f"  Status: {test_case.status.value} | Priority: {test_case.priority.value}")
        if test_case.preconditions:
            self._output("  Preconditions:")
            for precondition in test_case.preconditions:
                self._output(f"    - {precondition}")
        self._output("  Steps:")
        for step in test_case.steps:
            self._output(f"    {step.step_number}. {step.action}")
            if step.expected_result:
                self._output(f"       Expected: {step.expected_result}")
        self._output(f"  Expected Outcome: {test_case.expected_outcome}")

    def review_test_cases(self, test_cases: List[TestCase]) -> ReviewDecision:
        for test_case in test_cases:
            self.show_test_case(test_case)

        while True:
            choice = self.ask(
                "\n  [a]pprove, [e]dit, [r]egenerate, add [s]teps or s[k]ip: ", default='a'
            ).lower()
            if choice in SKIP_CHOICES:
                return ReviewDecision(action=ReviewAction.APPROVE, approved=False)
            if choice in REVIEW_CHOICES:
                break
            self._output(f"  Unknown choice: {choice}")

        action = REVIEW_CHOICES[choice]
        if action == ReviewAction.EDIT:
            return ReviewDecision(action=action, approved=True, edits=self._collect_edits(test_cases))
        return ReviewDecision(action=action, approved=action != ReviewAction.REGENERATE)

    def _collect_edits(self, test_cases: List[TestCase]) -> Dict[int, str]:
        """Ask for step numbers and replacement text; keys are zero-based indexes."""
        step_count = max((len(tc.steps) for tc in test_cases), default=0)
        edits: Dict[int, str] = {}
        while True:
            raw = self.ask("  Step number to edit (blank to finish): ")
            if not raw:
                return edits
            if not raw.isdigit() or not 1 <= int(raw) <= step_count:
                self._output(f"  Enter a step number between 1 and {step_count}")
                continue
            text = self.ask(f"  New text for step {raw}: ")
            if text:
                edits[int(raw) - 1] = text

    def ask_clarifying_questions(self, questions: List[ClarifyingQuestion]) -> Dict[str, str]:
        answers = {}
        for question in questions:
            self._output(f"\n  ? {question.question}")
            if question.context:
                self._output(f"    ({question.context})")
            answers[question.question] = self.ask("    > ", default=question.suggested_answer or "")
        return answers

    def ask_additional_steps(self) -> List[str]:
        raw = self.ask("  Enter additional steps (comma-separated): ")
        return [part.strip() for part in raw.split(',') if part.strip()]

    def select_app(self, app_names: List[str]) -> Optional[str]:
        """Pick an application by number; None when there is nothing to choose."""
        if not app_names:
            return None
        if len(app_names) == 1:
            return app_names[0]
        for idx, name in enumerate(app_names, start=1):
            self._output(f"  {idx}. {name}")
        raw = self.ask("  Application number: ", default="1")
        if raw.isdigit() and 1 <= int(raw) <= len(app_names):
            return app_names[int(raw) - 1]
        return app_names[0]
