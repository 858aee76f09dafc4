"""Splitting free-form tag text into tag tokens."""

import re

# Whitespace, commas and semicolons are equivalent separators
SEPARATOR_RE = re.compile(r"[\s,;]+")


def parse_tags(text: str | None) -> list[str]:
    """Split free-form text into tags.

    Any run of whitespace, commas or semicolons separates two tags, so
    "a, b;c" and "a b c" parse identically. Empty tokens are dropped and
    repeated tags are kept only at their first position.

    Args:
        text: Text as typed by the user (None is treated as empty)

    Returns:
        Ordered list of tags, empty if the text holds no tags
    """
    if not text:
        return []

    tags: list[str] = []
    for token in SEPARATOR_RE.split(text):
        token = token.strip()
        if token and token not in tags:
            tags.append(token)
    return tags
