from __future__ import annotations

import logging

from .scripts import KANJI_LANGUAGES, canonical_language, contains_kanji, is_kana, is_kana_string, is_kanji
from .tokens import SplitResult

__all__ = ["split", "splits_apply"]

logger = logging.getLogger(__name__)

# A reading longer than this many kana per base character is unlikely to
# belong to the trailing cluster alone.
_MAX_READING_RATIO = 2


def _leading_kana_len(text: str) -> int:
    count = 0
    for ch in text:
        if not is_kana(ch) or is_kanji(ch):
            break
        count += 1
    return count


def _trailing_kana_len(text: str) -> int:
    count = 0
    for ch in reversed(text):
        if not is_kana(ch) or is_kanji(ch):
            break
        count += 1
    return count


def _trim_reading(reading: str, trailing_kana: str) -> str:
    if trailing_kana and reading.endswith(trailing_kana) and len(reading) > len(trailing_kana):
        return reading[: len(reading) - len(trailing_kana)]
    return reading


def _simple_shape(base: str) -> tuple[str, str, str] | None:
    """Match ``kana* kanji+ kana*`` and return its three parts."""
    lead = _leading_kana_len(base)
    tail = _trailing_kana_len(base[lead:])
    core = base[lead : len(base) - tail]
    if not core or not all(is_kanji(ch) for ch in core):
        return None
    return base[:lead], core, base[len(base) - tail :]


def _trailing_cluster(base: str) -> tuple[str, str, str] | None:
    """Return ``(before, kanji, kana)`` for a base that ends in ``kanji+ kana*``."""
    tail = _trailing_kana_len(base)
    kanji_end = len(base) - tail
    kanji_start = kanji_end
    while kanji_start > 0 and is_kanji(base[kanji_start - 1]):
        kanji_start -= 1
    if kanji_start == kanji_end:
        return None
    return base[:kanji_start], base[kanji_start:kanji_end], base[kanji_end:]


def splits_apply(base: str, reading: str, language: str | None, kanji_languages=KANJI_LANGUAGES) -> bool:
    return (
        canonical_language(language) in kanji_languages
        and contains_kanji(base)
        and is_kana_string(reading)
    )


def split(
    base: str,
    reading: str,
    language: str | None,
    kanji_languages=KANJI_LANGUAGES,
) -> SplitResult:
    """
    Decide which part of ``base`` carries ``reading``.

    Okurigana after the Kanji is already visible as plain text, so when the
    reading ends with the same kana it is trimmed off and only the Kanji core
    is annotated. Bases that do not fit the ``kana* kanji+ kana*`` shape fall
    back to annotating their final Kanji cluster, and failing that the whole
    base with the unmodified reading.
    """
    whole = SplitResult(core=base, reading_core=reading)
    if not splits_apply(base, reading, language, kanji_languages):
        return whole

    simple = _simple_shape(base)
    if simple is not None:
        prefix_kana, core, trailing_kana = simple
        return SplitResult(
            core=core,
            reading_core=_trim_reading(reading, trailing_kana),
            prefix_kana=prefix_kana,
            trailing_kana=trailing_kana,
            strategy="simple",
        )

    cluster = _trailing_cluster(base)
    if cluster is not None:
        before, core, trailing_kana = cluster
        if len(reading) <= (len(core) + len(trailing_kana)) * _MAX_READING_RATIO:
            return SplitResult(
                core=core,
                reading_core=_trim_reading(reading, trailing_kana),
                trailing_kana=trailing_kana,
                leading_text=before,
                strategy="trailing_cluster",
            )

    logger.debug("Annotating whole base %r with reading %r", base, reading)
    return whole
