from __future__ import annotations

import pytest

from subruby.okurigana import split
from subruby.tokens import SplitResult


def test_trailing_kana_is_trimmed_when_reading_ends_with_it() -> None:
    result = split("食べた", "たべた", "ja")
    assert result == SplitResult(
        core="食",
        reading_core="た",
        trailing_kana="べた",
        strategy="simple",
    )


def test_reading_is_kept_when_suffix_differs() -> None:
    result = split("食べた", "くった", "ja")
    assert result.core == "食"
    assert result.trailing_kana == "べた"
    assert result.reading_core == "くった"


def test_prefix_kana_is_never_trimmed_from_reading() -> None:
    result = split("お茶", "おちゃ", "ja")
    assert result.prefix_kana == "お"
    assert result.core == "茶"
    assert result.reading_core == "おちゃ"
    assert result.strategy == "simple"


def test_trailing_cluster_after_latin() -> None:
    result = split("ABC漢字", "かんじ", "ja")
    assert result.strategy == "trailing_cluster"
    assert result.leading_text == "ABC"
    assert result.core == "漢字"
    assert result.reading_core == "かんじ"


def test_trailing_cluster_trims_its_okurigana() -> None:
    result = split("2人で話す", "はなす", "ja")
    assert result.strategy == "trailing_cluster"
    assert result.leading_text == "2人で"
    assert result.core == "話"
    assert result.trailing_kana == "す"
    assert result.reading_core == "はな"


def test_long_reading_falls_back_to_whole_base() -> None:
    result = split("食べ物", "たべもの", "ja")
    assert result == SplitResult(core="食べ物", reading_core="たべもの")


def test_iteration_marks_count_as_kanji() -> None:
    result = split("一ヶ月", "いっかげつ", "ja")
    assert result.strategy == "simple"
    assert result.core == "一ヶ月"


def test_reading_is_never_emptied() -> None:
    result = split("見る", "る", "ja")
    assert result.reading_core == "る"


@pytest.mark.parametrize(
    "base, reading, language",
    [
        ("幸せ", "しあわせ", "zh"),
        ("你好", "nǐhǎo", "zh"),
        ("東京", "Tokyo", "ja"),
        ("ひらがな", "ひらがな", "ja"),
        ("幸せ", "しあわせ", None),
    ],
)
def test_split_only_applies_to_kanji_with_kana_reading(base: str, reading: str, language: str | None) -> None:
    result = split(base, reading, language)
    assert result.strategy == "whole"
    assert result.core == base
    assert result.reading_core == reading


@pytest.mark.parametrize(
    "base, reading",
    [
        ("食べた", "たべた"),
        ("お茶", "おちゃ"),
        ("ABC漢字", "かんじ"),
        ("2人で話す", "はなす"),
        ("食べ物", "たべもの"),
        ("「本」", "ほん"),
        ("お見舞い", "おみまい"),
    ],
)
def test_split_never_loses_base_characters(base: str, reading: str) -> None:
    assert split(base, reading, "ja").base == base
