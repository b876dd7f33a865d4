"""
Text cleanup for assistant text (canned responses and streamed fragments).

normalize() is total and idempotent: normalize(normalize(x)) == normalize(x).
"""
import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,!?;:])")
# Letters only: keeps "3.5", "10:30" and "..." intact
_PUNCT_BEFORE_LETTER = re.compile(r"([.,!?;:])(?=[^\W\d_])")
_JOINERS = re.compile(r"\s*([-'’\"“”])\s*")
_INSIDE_OPEN_PAREN = re.compile(r"\(\s+")
_INSIDE_CLOSE_PAREN = re.compile(r"\s+\)")
_WORD_OPEN_PAREN = re.compile(r"(\w)\(")
_CLOSE_PAREN_WORD = re.compile(r"\)(\w)")


def normalize(text: Optional[str]) -> str:
    if not text:
        return ""
    out = _WHITESPACE.sub(" ", text)
    out = _SPACE_BEFORE_PUNCT.sub(r"\1", out)
    out = _PUNCT_BEFORE_LETTER.sub(r"\1 ", out)
    out = _JOINERS.sub(r"\1", out)
    out = _INSIDE_OPEN_PAREN.sub("(", out)
    out = _INSIDE_CLOSE_PAREN.sub(")", out)
    out = _WORD_OPEN_PAREN.sub(r"\1 (", out)
    out = _CLOSE_PAREN_WORD.sub(r") \1", out)
    return out.strip()
