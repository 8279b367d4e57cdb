"""User-defined subject tags for study sessions."""

from __future__ import annotations

import re
from dataclasses import dataclass

MAX_SUBJECTS = 20
MAX_NAME_LENGTH = 24
MIN_NAME_LENGTH = 1
MAX_SLUG_LENGTH = 30

GENERAL_SUBJECT_ID = "general"

EMOJI_PALETTE: list[str] = [
    "\U0001f4da", "\U0001f4d0", "\U0001f4bb", "\U0001f52c", "\U0001f4dd",
    "\U0001f3a8", "\U0001f3b5", "\U0001f4aa", "\U0001f30d", "\U0001f4d6",
    "\U0001f9ea", "\U0001f4ca", "\U0001f3af", "✏️", "\U0001f527",
    "\U0001f9e0", "\U0001f4d3", "\U0001f52d", "\U0001f392", "\U0001f3cb️",
    "\U0001f9ec", "⚙️", "\U0001f3b9", "\U0001f58c️", "\U0001f4c8",
    "\U0001f5fa️", "\U0001f9ee", "\U0001f510", "\U0001f3ad", "\U0001f4e1",
]

COLOR_PALETTE: list[str] = [
    "blue", "green", "purple", "amber", "cyan",
    "pink", "rose", "indigo", "emerald", "orange",
    "slate",
]

_HTML_TAG = re.compile(r"<[^>]*>")
_UNSAFE_CHARS = re.compile(r"[<>\"'`\\]")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_ALLOWED_NAME = re.compile(r"^[a-zA-Z0-9\s\-_&+.]+$")


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    emoji: str
    color: str

    @property
    def label(self) -> str:
        return f"{self.emoji} {self.name}"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "emoji": self.emoji, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict) -> Subject:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            emoji=str(data.get("emoji", EMOJI_PALETTE[0])),
            color=str(data.get("color", "slate")),
        )


# Ids match the session tags written by earlier versions.
DEFAULT_SUBJECTS: list[Subject] = [
    Subject(id="math", name="Math", emoji="\U0001f4d0", color="blue"),
    Subject(id="science", name="Science", emoji="\U0001f52c", color="green"),
    Subject(id="english", name="English", emoji="\U0001f4dd", color="purple"),
    Subject(id="coding", name="Coding", emoji="\U0001f4bb", color="cyan"),
    Subject(id="reading", name="Reading", emoji="\U0001f4da", color="emerald"),
]


@dataclass
class ValidationResult:
    valid: bool
    sanitized: str
    error: str | None = None


def sanitize_input(raw: str) -> str:
    """Strip markup and script-like fragments, trim, and cap the length."""
    cleaned = _HTML_TAG.sub("", raw)
    cleaned = _UNSAFE_CHARS.sub("", cleaned)
    cleaned = _JS_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned.strip()[:MAX_NAME_LENGTH]


def slugify(name: str) -> str:
    """Lowercase slug used as the subject id: 'Data Science' -> 'data-science'."""
    slug = re.sub(r"\s+", "-", name.lower().strip())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return slug[:MAX_SLUG_LENGTH]


def validate_subject_name(raw: str, existing: list[Subject]) -> ValidationResult:
    """Validate a new subject name against the rules and the existing subjects.

    Never raises: problems are reported in the returned ValidationResult.
    """
    sanitized = sanitize_input(raw)

    if len(sanitized) < MIN_NAME_LENGTH:
        return ValidationResult(valid=False, sanitized=sanitized, error="Name cannot be empty")
    if len(sanitized) > MAX_NAME_LENGTH:
        return ValidationResult(
            valid=False, sanitized=sanitized, error=f"Max {MAX_NAME_LENGTH} characters"
        )
    if not _ALLOWED_NAME.match(sanitized):
        return ValidationResult(
            valid=False,
            sanitized=sanitized,
            error="Only letters, numbers, spaces, and - _ & + . allowed",
        )
    slug = slugify(sanitized)
    if not slug:
        return ValidationResult(
            valid=False, sanitized=sanitized, error="Name must contain a letter or digit"
        )
    if any(s.id == slug for s in existing):
        return ValidationResult(valid=False, sanitized=sanitized, error="Subject already exists")
    if len(existing) >= MAX_SUBJECTS:
        return ValidationResult(
            valid=False, sanitized=sanitized, error=f"Maximum {MAX_SUBJECTS} subjects reached"
        )
    return ValidationResult(valid=True, sanitized=sanitized)


def create_subject(name: str, existing: list[Subject]) -> Subject:
    """Build a Subject from a (validated) name, picking emoji and color by position."""
    sanitized = sanitize_input(name)
    idx = len(existing)
    return Subject(
        id=slugify(sanitized),
        name=sanitized,
        emoji=EMOJI_PALETTE[idx % len(EMOJI_PALETTE)],
        color=COLOR_PALETTE[idx % len(COLOR_PALETTE)],
    )


def get_subject(subject_id: str, subjects: list[Subject]) -> Subject | None:
    return next((s for s in subjects if s.id == subject_id), None)


def subject_label(subject_id: str | None, subjects: list[Subject]) -> str:
    """Display label for a subject id, tolerating ids of deleted subjects."""
    key = subject_id or GENERAL_SUBJECT_ID
    subject = get_subject(key, subjects)
    if subject is not None:
        return subject.label
    if key == GENERAL_SUBJECT_ID:
        return "\U0001f4cc General"
    return f"\U0001f4cc {key}"
