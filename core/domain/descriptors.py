"""
Action and verification descriptors.

Classifier output describing what a step's free text means. Not persisted;
both the script generator and the live runner consume these.
"""
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union


class ActionKind(str, Enum):
    NAVIGATE = "navigate"
    CLICK = "click"
    FILL = "fill"
    SELECT = "select"
    WAIT = "wait"
    UNCLASSIFIED = "unclassified"


class VerificationKind(str, Enum):
    VISIBLE = "visible"
    CONTAINS_TEXT = "contains_text"
    URL_MATCHES = "url_matches"
    UNVERIFIED = "unverified"


@dataclass(frozen=True)
class Navigate:
    """Go to a URL. `url` is None when the text named no URL or path."""
    url: Optional[str] = None
    kind: ClassVar[ActionKind] = ActionKind.NAVIGATE


@dataclass(frozen=True)
class Click:
    target_label: str
    kind: ClassVar[ActionKind] = ActionKind.CLICK


@dataclass(frozen=True)
class Fill:
    field: str
    value: str
    kind: ClassVar[ActionKind] = ActionKind.FILL


@dataclass(frozen=True)
class Select:
    option: str
    dropdown: str
    kind: ClassVar[ActionKind] = ActionKind.SELECT


@dataclass(frozen=True)
class Wait:
    """Fixed delay in milliseconds, or network idle when None."""
    milliseconds: Optional[int] = None
    kind: ClassVar[ActionKind] = ActionKind.WAIT


@dataclass(frozen=True)
class UnclassifiedAction:
    raw_text: str
    kind: ClassVar[ActionKind] = ActionKind.UNCLASSIFIED


@dataclass(frozen=True)
class Visible:
    target: str
    kind: ClassVar[VerificationKind] = VerificationKind.VISIBLE


@dataclass(frozen=True)
class ContainsText:
    text: str
    kind: ClassVar[VerificationKind] = VerificationKind.CONTAINS_TEXT


@dataclass(frozen=True)
class UrlMatches:
    pattern: str
    kind: ClassVar[VerificationKind] = VerificationKind.URL_MATCHES


@dataclass(frozen=True)
class Unverified:
    """Expected result that needs a hand-written assertion.

    `manual_assertion` marks success/error/message phrases that clearly
    call for an assertion the classifier cannot build.
    """
    raw_text: str
    manual_assertion: bool = False
    kind: ClassVar[VerificationKind] = VerificationKind.UNVERIFIED


ActionDescriptor = Union[Navigate, Click, Fill, Select, Wait, UnclassifiedAction]
VerificationDescriptor = Union[Visible, ContainsText, UrlMatches, Unverified]
