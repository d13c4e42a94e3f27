from __future__ import annotations

import unicodedata

__all__ = [
    "CJK_LANGUAGES",
    "KANJI_LANGUAGES",
    "canonical_language",
    "contains_kanji",
    "is_cluster_continuation",
    "is_kana",
    "is_kana_string",
    "is_kanji",
    "katakana_to_hiragana",
]

# Languages whose subtitles are written without word spacing and carry
# bracket readings (furigana, pinyin, jyutping).
CJK_LANGUAGES = frozenset({"ja", "zh", "zh_trad", "yue"})
# Languages where readings annotate Kanji followed by inflectional kana.
KANJI_LANGUAGES = frozenset({"ja"})

# Half-width voiced sound marks are spacing characters, but NFKC composes them
# with the preceding kana.
_HALFWIDTH_SOUND_MARKS = "\uff9e\uff9f"


def canonical_language(hint: str | None) -> str:
    if not hint:
        return ""
    return hint.strip().lower()


def is_kanji(ch: str) -> bool:
    if not ch:
        return False
    code = ord(ch)
    return (
        0x4E00 <= code <= 0x9FFF  # CJK Unified Ideographs
        or 0x3400 <= code <= 0x4DBF  # Extension A
        or 0xF900 <= code <= 0xFAFF  # Compatibility Ideographs
        or ch in "々〆ヵヶ"
    )


def is_kana(ch: str) -> bool:
    if not ch:
        return False
    code = ord(ch)
    return (
        0x3040 <= code <= 0x309F  # Hiragana
        or 0x30A0 <= code <= 0x30FF  # Katakana
        or ch == "ー"
    )


def is_kana_string(text: str) -> bool:
    return bool(text) and all(is_kana(ch) for ch in text)


def contains_kanji(text: str) -> bool:
    return any(is_kanji(ch) for ch in text)


def is_cluster_continuation(ch: str) -> bool:
    """True when *ch* belongs to the character before it (combining marks)."""
    return unicodedata.combining(ch) != 0 or ch in _HALFWIDTH_SOUND_MARKS


def katakana_to_hiragana(text: str) -> str:
    result_chars: list[str] = []
    for ch in text:
        code = ord(ch)
        if 0x30A1 <= code <= 0x30F6:
            result_chars.append(chr(code - 0x60))
        else:
            result_chars.append(ch)
    return "".join(result_chars)
