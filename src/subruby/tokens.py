from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Union

__all__ = [
    "AnnotatedRun",
    "PlainRun",
    "SplitResult",
    "SplitStrategy",
    "Token",
    "serialize_tokens",
]

SplitStrategy = Literal["simple", "trailing_cluster", "whole"]


@dataclass(frozen=True)
class PlainRun:
    """Unannotated subtitle text starting at ``start`` in the raw string."""

    text: str
    start: int = 0

    @property
    def end(self) -> int:
        return self.start + len(self.text)


@dataclass(frozen=True)
class AnnotatedRun:
    """
    A ``base[reading]`` span of the raw subtitle.

    ``start`` is the first base character, ``reading_start`` the first reading
    character and ``end`` is one past the closing bracket.
    """

    base: str
    reading: str
    start: int = 0
    reading_start: int = 0
    end: int = 0


Token = Union[PlainRun, AnnotatedRun]


@dataclass(frozen=True)
class SplitResult:
    """
    How an annotated base is laid out around its ruby group.

    ``leading_text + prefix_kana + core + trailing_kana`` always equals the
    base. Only ``core`` is annotated, with ``reading_core``.
    """

    core: str
    reading_core: str
    prefix_kana: str = ""
    trailing_kana: str = ""
    leading_text: str = ""
    strategy: SplitStrategy = "whole"

    @property
    def base(self) -> str:
        return self.leading_text + self.prefix_kana + self.core + self.trailing_kana


def serialize_tokens(tokens: Iterable[Token]) -> list[dict[str, object]]:
    payload: list[dict[str, object]] = []
    for token in tokens:
        if isinstance(token, AnnotatedRun):
            payload.append(
                {
                    "type": "annotated",
                    "base": token.base,
                    "reading": token.reading,
                    "start": token.start,
                    "reading_start": token.reading_start,
                    "end": token.end,
                }
            )
        else:
            payload.append(
                {
                    "type": "plain",
                    "text": token.text,
                    "start": token.start,
                    "end": token.end,
                }
            )
    return payload
