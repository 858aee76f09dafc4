"""Format and safety checks for tags passed to the tracker.

Tags end up as arguments on the tracker command line, so anything that
looks like shell syntax is refused even though the tracker is never run
through a shell.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from .tag_parser import parse_tags

MAX_TAG_LENGTH = 128
MIN_TAG_LENGTH = 1

FORBIDDEN_CHARACTERS = frozenset(";&|`$(){}[]")
WHITESPACE_RE = re.compile(r"\s")

NO_TAGS_MESSAGE = "No valid tags found"

# Long tags are shortened in error messages
DISPLAY_LENGTH = 32


@dataclass
class ValidationResult:
    """Outcome of validating a tag string or tag list.

    Attributes:
        is_valid: True when no errors were found
        errors: Human-readable errors, ordered by tag position
        tags: The parsed tags, including invalid ones
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Allow boolean checks: if result: ..."""
        return self.is_valid


def _display(tag: str) -> str:
    if len(tag) > DISPLAY_LENGTH:
        return tag[: DISPLAY_LENGTH - 3] + "..."
    return tag


def _tokenize(value: str | Sequence[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return parse_tags(value)

    # Already split by the caller; keep embedded whitespace so it gets reported
    tags: list[str] = []
    for item in value:
        item = item.strip()
        if item and item not in tags:
            tags.append(item)
    return tags


def check_tag(tag: str) -> list[str]:
    """Return the problems with a single tag (empty list if it is fine)."""
    problems = []
    if not MIN_TAG_LENGTH <= len(tag) <= MAX_TAG_LENGTH:
        problems.append(
            f"must be between {MIN_TAG_LENGTH} and {MAX_TAG_LENGTH} characters, got {len(tag)}"
        )
    forbidden = sorted(FORBIDDEN_CHARACTERS.intersection(tag))
    if forbidden:
        problems.append(f"contains forbidden characters: {' '.join(forbidden)}")
    if WHITESPACE_RE.search(tag):
        problems.append("contains whitespace")
    if tag.startswith("-"):
        # would be read as an option by the tracker
        problems.append("must not start with '-'")
    return problems


def validate_tags(value: str | Sequence[str] | None) -> ValidationResult:
    """Parse and validate tags.

    Strings are split with parse_tags(). Sequences are taken as already
    split: each element is stripped and empty elements are dropped.

    Every tag is checked even after an earlier one fails, so the error list
    covers the whole input.

    Args:
        value: Free-form tag text or a list of tags

    Returns:
        ValidationResult with the parsed tags and any errors
    """
    tags = _tokenize(value)
    if not tags:
        return ValidationResult(is_valid=False, errors=[NO_TAGS_MESSAGE], tags=[])

    errors = []
    for index, tag in enumerate(tags, start=1):
        for problem in check_tag(tag):
            errors.append(f"Tag {index} ('{_display(tag)}') {problem}")

    return ValidationResult(is_valid=not errors, errors=errors, tags=tags)
