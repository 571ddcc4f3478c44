"""
Heuristic content moderation

Pipeline: PII scrub -> unsafe language -> defamation -> length. The scrub always
runs first so ``cleaned`` is the same text whichever stage rejects it.
"""
# Standard library imports
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Pattern, Iterable

# Local imports
from moderation.messages import ModerationReason

logger = logging.getLogger(__name__)

MIN_MESSAGE_LENGTH = 3
MAX_MESSAGE_LENGTH = 5000

EMAIL_PLACEHOLDER = "[email removed]"
PHONE_PLACEHOLDER = "[phone removed]"
ADDRESS_PLACEHOLDER = "[address removed]"

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

PHONE_RES = [
    # International, leading plus: +44 20 7946 0958
    re.compile(r"(?<!\w)\+\d{1,3}(?:[-.\s]?\d{2,4}){3,5}(?!\w)"),
    # North American: 555-123-4567, 555.123.4567, (555) 123-4567, +1 555 123 4567
    re.compile(r"(?<![\w+])(?:\+?1[-.\s]?)?(?:\(\d{3}\)|\d{3})[-.\s]?\d{3}[-.\s]?\d{4}(?!\w)"),
]

ADDRESS_RE = re.compile(
    r"\b\d{1,6}\s+(?:[A-Za-z][A-Za-z'-]*\s+){1,3}"
    r"(?:street|st|avenue|ave|road|rd|drive|dr|lane|ln|boulevard|blvd|way|court|ct|place|pl)\b\.?",
    re.I,
)

HATE_SPEECH_RES = [
    re.compile(r"\b(kill|murder|death\s+threat|die|harm)\s+(yourself|your\s+self|you|them|him|her)\b", re.I),
    re.compile(r"\b(racist|racism|nazi|kkk|white\s+supremacy)\b", re.I),
]

HARASSMENT_RES = [
    re.compile(r"(?<!\w)(f\*\*k\s+you|f\s+u\s+c\s+k|go\s+to\s+hell|damn\s+you)\b", re.I),
    re.compile(r"\b(threat|threatening|harass|harassing)\b", re.I),
]

PUBLIC_FIGURES = [
    # US presidents
    "biden", "trump", "obama", "bush", "clinton",
    # Other politicians
    "harris", "pence", "pelosi", "mcconnell", "schumer",
    # Celebrities
    "taylor swift", "beyonce", "oprah", "elon musk", "bill gates",
]

# Capitalised subjects that are holiday characters, not people
FICTIONAL_SUBJECTS = {"grinch", "santa", "rudolph", "scrooge", "frosty", "krampus"}

_PRONOUN = r"\b(?i:you|they|he|she|him|her)"
_NAME = r"\b(?P<name>[A-Z][a-z]+)"


def _subject_patterns(predicate: str) -> List[Pattern]:
    """Build pronoun and named-subject variants of an accusation"""
    return [
        re.compile(rf"{_PRONOUN}\s+(?i:{predicate})\b"),
        re.compile(rf"{_NAME}\s+(?i:{predicate})\b"),
    ]


ACCUSATION_RES = (
    _subject_patterns(r"stole|is\s+a\s+thief|committed\s+fraud|is\s+a\s+scammer")
    + _subject_patterns(r"(?:are|is)\s+(?:a\s+liar|lying|deceiving)")
    + _subject_patterns(r"abused|committed\s+violence|is\s+violent")
    + [re.compile(r"\b(criminal|illegal|lawsuit|sue|suing)\s+(activity|act|action|behavior)\b", re.I)]
)

CRIMINAL_ACCUSATION_RES = (
    _subject_patterns(r"committed\s+fraud|is\s+a\s+scammer|stole")
    + [re.compile(r"\b(criminal|illegal)\s+(activity|act|action)\b", re.I)]
)

_PUBLIC_FIGURE_RES = [
    re.compile(r"\b" + r"\s+".join(re.escape(part) for part in figure.split()) + r"\b", re.I)
    for figure in PUBLIC_FIGURES
]


@dataclass
class ModerationVerdict:
    """Result of moderating one message"""
    allowed: bool
    cleaned: str
    reason: Optional[ModerationReason] = None
    matched_patterns: List[str] = field(default_factory=list)


class Moderator(Protocol):
    """Anything that can classify a message, heuristic or model based"""

    def classify(self, text: str) -> ModerationVerdict:
        ...


def scrub_pii(text: str) -> str:
    """Replace emails, phone numbers and street addresses with placeholders"""
    cleaned = EMAIL_RE.sub(EMAIL_PLACEHOLDER, text)
    for pattern in PHONE_RES:
        cleaned = pattern.sub(PHONE_PLACEHOLDER, cleaned)
    return ADDRESS_RE.sub(ADDRESS_PLACEHOLDER, cleaned)


def _matching(patterns: Iterable[Pattern], text: str) -> List[str]:
    matched = []
    for pattern in patterns:
        for match in pattern.finditer(text):
            name = match.groupdict().get("name")
            if name and name.lower() in FICTIONAL_SUBJECTS:
                continue
            matched.append(pattern.pattern)
            break
    return matched


def mentions_public_figure(text: str) -> bool:
    return any(pattern.search(text) for pattern in _PUBLIC_FIGURE_RES)


class HeuristicModerator:
    """Regex and keyword based moderator"""

    def classify(self, text: str) -> ModerationVerdict:
        cleaned = scrub_pii(text or "")

        unsafe = _matching(HATE_SPEECH_RES + HARASSMENT_RES, cleaned)
        if unsafe:
            return ModerationVerdict(False, cleaned, ModerationReason.INAPPROPRIATE, unsafe)

        accusations = _matching(ACCUSATION_RES, cleaned)
        if accusations:
            if not mentions_public_figure(cleaned):
                return ModerationVerdict(False, cleaned, ModerationReason.DEFAMATORY, accusations)
            # General criticism of public figures is fine, criminal claims are not
            criminal = _matching(CRIMINAL_ACCUSATION_RES, cleaned)
            if criminal:
                return ModerationVerdict(False, cleaned, ModerationReason.CRIMINAL_ACCUSATION, criminal)

        if len(cleaned.strip()) < MIN_MESSAGE_LENGTH:
            return ModerationVerdict(False, cleaned, ModerationReason.TOO_SHORT)

        if len(cleaned) > MAX_MESSAGE_LENGTH:
            return ModerationVerdict(False, cleaned, ModerationReason.TOO_LONG)

        return ModerationVerdict(True, cleaned)


default_moderator = HeuristicModerator()


def moderate(text: str, moderator: Optional[Moderator] = None) -> ModerationVerdict:
    """
    Moderate a visitor message

    Args:
        text: raw message
        moderator: classifier to use, the heuristic one by default

    Returns:
        ModerationVerdict with the scrubbed text and, when blocked, the reason
    """
    verdict = (moderator or default_moderator).classify(text)
    if not verdict.allowed:
        logger.warning(f"Message rejected by moderation: reason={verdict.reason.name}")
    return verdict
