"""
Acceptance Criteria Parser

Turns loosely structured acceptance criteria into numbered test steps:
- Splits the text into lines on newlines and list markers
- Reads Given/When/Then/And keywords at the start of each line
- Raises clarifying questions when nothing usable is found

Parsing never raises on malformed criteria; it falls back to a seed step
and a fixed set of questions instead.
"""
import re
from typing import List, Optional, Tuple

from core.domain.test_case import ClarifyingQuestion, TestStep, renumber
from core.interfaces.memory_store import IMemoryStore
from core.services.metrics.logger import StructuredLogger, get_logger


class CriteriaParser:
    """Parses acceptance criteria text into test steps and open questions."""

    # Newlines and bullets always split; dashes and asterisks only as list markers
    LINE_DELIMITERS = re.compile(r'[\r\n•]+|(?<=\s)[-*]+(?=\s)')
    LIST_MARKER = re.compile(r'^[-*\s]+')

    SECTION_HEADER = re.compile(
        r'^(?:given|when|then|and|background|scenario(?: outline)?|examples|feature)\s*:',
        re.IGNORECASE
    )
    MARKDOWN_HEADING = re.compile(r'^#+')

    KEYWORD_LINE = re.compile(r'^(given|when|then|and)\s+(.+)', re.IGNORECASE)

    # Linter vocabulary
    EXPECTATION_WORDS = re.compile(r'when|then|should|expect|verify', re.IGNORECASE)
    BDD_OPENING = re.compile(r'^(?:given|when|then|scenario|test)', re.IGNORECASE)
    HEDGING_WORDS = re.compile(r'\b(?:maybe|perhaps|might|could|try)\b', re.IGNORECASE)
    MIN_CRITERIA_LENGTH = 10

    VERIFY_ACTION = "Verify"
    SEED_ACTION = "Navigate to application"
    SEED_EXPECTED = "Application loads successfully"

    def __init__(
        self,
        memory_store: Optional[IMemoryStore] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """Initialize parser.

        Args:
            memory_store: Store consulted by enrich(); enrichment is a no-op without one
            logger: Structured logger (shared pipeline logger by default)
        """
        self.memory_store = memory_store
        self.logger = logger or get_logger()

    def parse(
        self,
        criteria_text: str,
        fallback_description: str = "",
        task_id: Optional[int] = None
    ) -> Tuple[List[TestStep], List[ClarifyingQuestion]]:
        """Parse acceptance criteria into steps.

        Args:
            criteria_text: Raw acceptance criteria
            fallback_description: Work item description, used when criteria are missing
            task_id: Work item ID, for logging only

        Returns:
            Tuple of (steps numbered 1..N, clarifying questions)
        """
        if not criteria_text or not criteria_text.strip():
            steps, questions = self._from_description(fallback_description)
            self.logger.log_parse(task_id, len(steps), len(questions), fallback_used=True)
            return steps, questions

        steps: List[TestStep] = []
        questions: List[ClarifyingQuestion] = []
        role: Optional[str] = None

        for line in self._split_lines(criteria_text):
            if self.SECTION_HEADER.match(line) or self.MARKDOWN_HEADING.match(line):
                continue

            match = self.KEYWORD_LINE.match(line)
            if not match:
                role = 'generic'
                self._open_step(steps, action=line)
                continue

            keyword = match.group(1).lower()
            body = match.group(2).strip()

            if keyword == 'and':
                # And repeats the role of the line before it
                keyword = role or 'generic'
                if keyword == 'then':
                    self._open_step(steps, action=self.VERIFY_ACTION, expected_result=body)
                elif keyword != 'given':
                    self._open_step(steps, action=body)
                continue

            role = keyword
            if keyword == 'given':
                # Preconditions are not captured as steps
                continue
            if keyword == 'when':
                self._open_step(steps, action=body)
            elif steps and not steps[-1].expected_result:
                steps[-1].expected_result = body
            else:
                self._open_step(steps, action=self.VERIFY_ACTION, expected_result=body)

        if not steps:
            questions.append(ClarifyingQuestion(
                question="No clear acceptance criteria found. Please provide step-by-step test steps.",
                context=f"Task description: {fallback_description}",
                priority="High"
            ))

        self.logger.log_parse(task_id, len(steps), len(questions))
        return steps, questions

    def detect_issues(self, criteria_text: str) -> List[str]:
        """Lint acceptance criteria. Every matching issue is returned, in a fixed order."""
        text = criteria_text or ""
        issues = []

        if len(text.strip()) < self.MIN_CRITERIA_LENGTH:
            issues.append("too short")

        if not self.EXPECTATION_WORDS.search(text):
            issues.append("lacks clear actions/expectations")

        if not self.BDD_OPENING.match(text.strip()):
            issues.append("not BDD format")

        if self.HEDGING_WORDS.search(text):
            issues.append("uncertain language")

        return issues

    def enrich(self, steps: List[TestStep], app_name: Optional[str]) -> List[TestStep]:
        """Prepend the application's common steps from memory.

        Common steps become 1..K and the given steps follow from K+1.
        Calling this twice prepends twice; TestCaseGenerator.enrich_test_case
        guards against that.
        """
        if not app_name or self.memory_store is None:
            return steps

        profile = self.memory_store.get_app_profile(app_name)
        if profile is None or not profile.common_steps:
            return steps

        common = [
            TestStep(step_number=idx + 1, action=text)
            for idx, text in enumerate(t for t in profile.common_steps if t and t.strip())
        ]
        self.logger.debug("steps_enriched", app_name=app_name, common_steps=len(common))
        return common + renumber(steps, start=len(common) + 1)

    def _split_lines(self, text: str) -> List[str]:
        lines = []
        for piece in self.LINE_DELIMITERS.split(text):
            line = self.LIST_MARKER.sub('', piece).strip()
            if line:
                lines.append(line)
        return lines

    @staticmethod
    def _open_step(steps: List[TestStep], action: str, expected_result: str = "") -> None:
        steps.append(TestStep(
            step_number=len(steps) + 1,
            action=action,
            expected_result=expected_result
        ))

    def _from_description(self, description: str) -> Tuple[List[TestStep], List[ClarifyingQuestion]]:
        """Seed step plus the fixed clarifying questions."""
        steps = [TestStep(
            step_number=1,
            action=self.SEED_ACTION,
            expected_result=self.SEED_EXPECTED
        )]
        return steps, self.clarifying_questions(description)

    @staticmethod
    def clarifying_questions(description: str = "") -> List[ClarifyingQuestion]:
        """The three questions asked whenever criteria are missing or weak."""
        return [
            ClarifyingQuestion(
                question="What is the main feature or action being tested?",
                context=f"Description: {description}",
                priority="High"
            ),
            ClarifyingQuestion(
                question="What data or inputs are required?",
                context="Please specify any test data needed for this test case.",
                priority="High"
            ),
            ClarifyingQuestion(
                question="What is the expected outcome?",
                context="Please describe what should happen after the action is completed.",
                priority="High"
            ),
        ]
