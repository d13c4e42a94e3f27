from __future__ import annotations

from typing import Iterable

from .tokens import AnnotatedRun, PlainRun, Token

__all__ = ["parse", "visible_text"]

_OPEN = "["
_CLOSE = "]"


def _is_base_char(ch: str) -> bool:
    return not ch.isspace() and ch != _OPEN and ch != _CLOSE


def parse(raw: str) -> list[Token]:
    """
    Split subtitle text into plain runs and ``base[reading]`` annotations.

    The base is the run of non-whitespace, non-bracket characters directly in
    front of ``[``. A bracket without a base, an unterminated bracket or an
    empty reading is left in the output as plain text.
    """
    tokens: list[Token] = []
    plain_start = 0
    idx = 0
    length = len(raw)
    while idx < length:
        open_idx = raw.find(_OPEN, idx)
        if open_idx == -1:
            break
        close_idx = raw.find(_CLOSE, open_idx + 1)
        if close_idx == -1:
            # Nothing after this can close, so the rest is plain text.
            break
        nested_open = raw.rfind(_OPEN, open_idx + 1, close_idx)
        if nested_open != -1:
            # Only the innermost "[" can start the reading.
            idx = nested_open
            continue
        reading = raw[open_idx + 1 : close_idx]
        base_start = open_idx
        while base_start > plain_start and _is_base_char(raw[base_start - 1]):
            base_start -= 1
        if base_start == open_idx or not reading.strip():
            idx = close_idx + 1
            continue
        if base_start > plain_start:
            tokens.append(PlainRun(raw[plain_start:base_start], plain_start))
        tokens.append(
            AnnotatedRun(
                base=raw[base_start:open_idx],
                reading=reading,
                start=base_start,
                reading_start=open_idx + 1,
                end=close_idx + 1,
            )
        )
        plain_start = close_idx + 1
        idx = plain_start
    if plain_start < length:
        tokens.append(PlainRun(raw[plain_start:], plain_start))
    return tokens


def visible_text(tokens: Iterable[Token]) -> str:
    parts: list[str] = []
    for token in tokens:
        if isinstance(token, AnnotatedRun):
            parts.append(token.base)
        else:
            parts.append(token.text)
    return "".join(parts)
