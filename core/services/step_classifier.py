"""
Step Classifier

Maps the free text of a test step to an action descriptor and the free text
of its expected result to a verification descriptor.

Matching is keyword based and deliberately conservative:
- Categories are checked in a fixed priority order; the first match wins
- Keywords match at a word boundary, case-insensitively
- Extracted values keep the casing of the original text
- Anything that cannot be read with confidence comes back unclassified

Both the script generator and the live runner consume these descriptors,
so what a generated script does and what a live run does never drift apart.
"""
import re
from typing import Optional, Tuple

from core.domain.descriptors import (
    ActionDescriptor,
    Click,
    ContainsText,
    Fill,
    Navigate,
    Select,
    UnclassifiedAction,
    Unverified,
    UrlMatches,
    VerificationDescriptor,
    Visible,
    Wait
)
from core.domain.test_case import TestStep


# Action keywords, in priority order
NAVIGATE_PATTERN = re.compile(r'\b(?:navigate|go to|goto|visit)', re.IGNORECASE)
CLICK_PATTERN = re.compile(r'\bclick', re.IGNORECASE)
FILL_PATTERN = re.compile(r'\b(?:enter|type|fill)', re.IGNORECASE)
SELECT_PATTERN = re.compile(r'\bselect', re.IGNORECASE)
WAIT_PATTERN = re.compile(r'\bwait', re.IGNORECASE)

# Verification keywords, in priority order
VISIBLE_PATTERN = re.compile(r'\b(?:visible|appear|display|shown)', re.IGNORECASE)
TEXT_PATTERN = re.compile(r'\b(?:contain|show|displays)', re.IGNORECASE)
URL_PATTERN = re.compile(r'\b(?:url|redirect)', re.IGNORECASE)
MESSAGE_PATTERN = re.compile(r'\b(?:success|error|message)', re.IGNORECASE)

# Extraction
URL_TOKEN = re.compile(r'https?://\S+|(?<!\S)/\S+')
CLICK_TARGET = re.compile(r'\bclick(?:s|ed)?\s+(?:on\s+)?(?:the\s+)?([^,]*)', re.IGNORECASE)
FILL_PARTS = re.compile(
    r'\b(?:enter|type|fill)(?:s|ed)?\s+(.+?)\s+(?:in|into)\s+(?:the\s+)?(.+)',
    re.IGNORECASE
)
SELECT_PARTS = re.compile(r'\bselect(?:s|ed)?\s+(.+?)\s+from\s+(?:the\s+)?(.+)', re.IGNORECASE)
WAIT_PARTS = re.compile(r'\bwait(?:s)?\s+(?:for\s+)?(\d+)\s*([a-z]+)?', re.IGNORECASE)
QUOTED = re.compile(r'"([^"]+)"|\'([^\']+)\'')
VISIBLE_SUBJECT = re.compile(
    r'^(.*?)\s*\b(?:(?:is|are|should|must|will|be|been|becomes?|gets?)\s+)*'
    r'(?:visible|appears?|appeared|displayed|display|displays|shown)\b',
    re.IGNORECASE
)
VISIBLE_OBJECT = re.compile(
    r'\b(?:visible|appears?|displays?|displayed|shown)\b[\s,:]*(?:(?:in|on|at)\s+)?(?:the\s+)?(.*)$',
    re.IGNORECASE
)
TEXT_OBJECT = re.compile(
    r'\b(?:contains?|shows?|displays?)\b\s*(?:the\s+)?(?:text\s+)?(.*)$',
    re.IGNORECASE
)

SECOND_UNITS = {'s', 'sec', 'secs', 'second', 'seconds'}
MINUTE_UNITS = {'m', 'min', 'mins', 'minute', 'minutes'}

TRAILING_PUNCTUATION = '.,;:!)\'"'
LEADING_ARTICLE = re.compile(r'^(?:the|a|an)\s+', re.IGNORECASE)


def _clean(text: str) -> str:
    """Trim whitespace, trailing punctuation and surrounding quotes."""
    text = text.strip().rstrip(TRAILING_PUNCTUATION).strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in '"\'':
        text = text[1:-1].strip()
    return text.strip('"\'').strip()


def _drop_suffix(text: str, suffixes: Tuple[str, ...]) -> str:
    """Drop a trailing control word such as 'button' or 'field'."""
    lowered = text.lower()
    for suffix in suffixes:
        if lowered.endswith(' ' + suffix):
            return text[:-len(suffix)].strip()
    return text


def find_url(text: str) -> Optional[str]:
    """First absolute URL or absolute path in `text`, trailing punctuation trimmed."""
    match = URL_TOKEN.search(text)
    if not match:
        return None
    url = match.group(0).rstrip(TRAILING_PUNCTUATION)
    return url or None


def classify_action(text: str) -> ActionDescriptor:
    """Classify a step action.

    Priority: navigate, click, fill, select, wait. Text that matches a
    category keyword but not its expected shape is unclassified.

    Args:
        text: Free-text action, e.g. "user clicks login"

    Returns:
        One of the action descriptors; never raises
    """
    text = text or ""

    if NAVIGATE_PATTERN.search(text):
        return Navigate(url=find_url(text))

    if CLICK_PATTERN.search(text):
        match = CLICK_TARGET.search(text)
        label = _drop_suffix(_clean(match.group(1)), ('button',)) if match else ""
        if not label:
            return UnclassifiedAction(raw_text=text)
        return Click(target_label=label)

    if FILL_PATTERN.search(text):
        match = FILL_PARTS.search(text)
        if not match:
            return UnclassifiedAction(raw_text=text)
        value = _clean(match.group(1))
        field = _drop_suffix(_clean(match.group(2)), ('field', 'input', 'textbox', 'box'))
        if not field:
            return UnclassifiedAction(raw_text=text)
        return Fill(field=field, value=value)

    if SELECT_PATTERN.search(text):
        match = SELECT_PARTS.search(text)
        if not match:
            return UnclassifiedAction(raw_text=text)
        option = _clean(match.group(1))
        dropdown = _drop_suffix(_clean(match.group(2)), ('dropdown', 'list', 'menu'))
        if not option or not dropdown:
            return UnclassifiedAction(raw_text=text)
        return Select(option=option, dropdown=dropdown)

    if WAIT_PATTERN.search(text):
        match = WAIT_PARTS.search(text)
        if not match:
            # No explicit duration: wait for the network to settle
            return Wait(milliseconds=None)
        amount = int(match.group(1))
        unit = (match.group(2) or "").lower()
        # ms and bare numbers are already milliseconds
        if unit in SECOND_UNITS:
            amount *= 1000
        elif unit in MINUTE_UNITS:
            amount *= 60000
        return Wait(milliseconds=amount)

    return UnclassifiedAction(raw_text=text)


def _visible_target(text: str) -> str:
    quoted = QUOTED.search(text)
    if quoted:
        return (quoted.group(1) or quoted.group(2)).strip()

    subject = VISIBLE_SUBJECT.search(text)
    if subject:
        target = LEADING_ARTICLE.sub('', _clean(subject.group(1)))
        if target:
            return target

    obj = VISIBLE_OBJECT.search(text)
    if obj:
        return LEADING_ARTICLE.sub('', _clean(obj.group(1)))
    return ""


def classify_verification(text: str) -> VerificationDescriptor:
    """Classify an expected result.

    Priority: visible, contains text, url, message. Success/error/message
    phrases stay unverified but are flagged for a manual assertion.

    Args:
        text: Free-text expected result, e.g. "dashboard is visible"

    Returns:
        One of the verification descriptors; never raises
    """
    text = text or ""

    if VISIBLE_PATTERN.search(text):
        target = _visible_target(text)
        if not target:
            return Unverified(raw_text=text)
        return Visible(target=target)

    if TEXT_PATTERN.search(text):
        match = TEXT_OBJECT.search(text)
        if match:
            quoted = QUOTED.search(match.group(1))
            expected = (quoted.group(1) or quoted.group(2)) if quoted else _clean(match.group(1))
            if expected.strip():
                return ContainsText(text=expected.strip())
        return Unverified(raw_text=text)

    if URL_PATTERN.search(text):
        url = find_url(text)
        if not url:
            return Unverified(raw_text=text)
        return UrlMatches(pattern=url)

    if MESSAGE_PATTERN.search(text):
        return Unverified(raw_text=text, manual_assertion=True)

    return Unverified(raw_text=text)


class StepClassifier:
    """Classifies whole steps. Stateless; both backends share one instance freely."""

    @staticmethod
    def classify_action(text: str) -> ActionDescriptor:
        return classify_action(text)

    @staticmethod
    def classify_verification(text: str) -> VerificationDescriptor:
        return classify_verification(text)

    def classify_step(self, step: TestStep) -> Tuple[ActionDescriptor, Optional[VerificationDescriptor]]:
        """Descriptors for a step. The verification is None when no result is expected."""
        action = self.classify_action(step.action)
        if not step.expected_result or not step.expected_result.strip():
            return action, None
        return action, self.classify_verification(step.expected_result)
