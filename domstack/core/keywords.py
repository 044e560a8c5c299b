"""The six operation keywords of the language.

A program node whose tag is one of these names is a command; any other
tag (including ``#text``) is a literal whose value is its text content.
"""
from __future__ import annotations

from enum import Enum


class Keyword(str, Enum):
    LET  = "LET"     # bind a variable
    FREE = "FREE"    # unbind a variable
    ADD  = "ADD"
    SUB  = "SUB"
    LOG  = "LOG"
    REF  = "REF"     # dereference a variable


KEYWORDS: frozenset[str] = frozenset(k.value for k in Keyword)

assert len(KEYWORDS) == len(Keyword) == 6, "keyword table is inconsistent"


def keyword_for(tag: str) -> Keyword | None:
    """Return the Keyword named by ``tag``, or None for literal tags."""
    if tag in KEYWORDS:
        return Keyword(tag)
    return None


def is_keyword(tag: str) -> bool:
    return tag in KEYWORDS
