"""Canonical product labels."""

import re

MARKDOWN_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
BARE_URL = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
EMPTY_PARENS = re.compile(r"\(\s*\)")
STRAY_BRACKETS = re.compile(r"[\[\]<>{}]")
WHITESPACE = re.compile(r"\s+")


def _title_token(token: str) -> str:
    lowered = token.lower()
    for index, char in enumerate(lowered):
        if char.isalpha():
            return lowered[:index] + char.upper() + lowered[index + 1:]
    return token


def normalize_product_label(value: str | None) -> str:
    """
    Canonicalize a free-text product or app name.

    Markdown links keep only their text, bare URLs and stray brackets are
    removed, whitespace is collapsed and every token is title-cased, so
    "sales", " Sales " and "[SALES](https://x)" all become "Sales".

    Args:
        value: Raw label as found in a record or a stored selection

    Returns:
        Canonical label, or an empty string when nothing meaningful is left
    """
    if not value:
        return ""

    text = MARKDOWN_LINK.sub(r"\1", value)
    text = BARE_URL.sub(" ", text)
    text = EMPTY_PARENS.sub(" ", text)
    text = STRAY_BRACKETS.sub(" ", text)
    text = WHITESPACE.sub(" ", text).strip()

    return " ".join(_title_token(token) for token in text.split(" ") if token)
