from __future__ import annotations

from bs4 import BeautifulSoup

from subruby.config import RenderConfig
from subruby.highlight import (
    find_partial_groups,
    find_reading_groups,
    locate_mixed,
    project_markup,
    project_plain,
)
from subruby.locate import MatchSpan, locate
from subruby.markup import scan_markup
from subruby.normalize import normalize_markup, normalize_query
from subruby.parser import parse
from subruby.render import render

MARK = '<mark class="highlight">'
END = "</mark>"


def _ja(raw: str) -> str:
    return render(parse(raw), "ja")


def _assert_well_formed(markup: str) -> None:
    soup = BeautifulSoup(markup, "html.parser")
    for mark in soup.find_all("mark"):
        # A wrapper only ever holds text; it never encloses or splits a tag.
        assert mark.find(True) is None
        assert mark.find_parent("mark") is None


def test_plain_projection_wraps_the_slice() -> None:
    assert project_plain("hello world", MatchSpan(6, 11)) == f"hello {MARK}world{END}"


def test_plain_projection_escapes_every_part() -> None:
    assert project_plain("a<b&c", MatchSpan(0, 1)) == f"{MARK}a{END}&lt;b&amp;c"
    assert project_plain("a<b", None) == "a&lt;b"


def test_plain_projection_uses_configured_tag() -> None:
    config = RenderConfig(highlight_tag="em", highlight_class="")
    assert project_plain("abc", MatchSpan(1, 2), config) == "a<em>b</em>c"


def test_markup_projection_splits_wrappers_at_tags() -> None:
    markup = _ja("幸せ[しあわせ]に")
    haystack = normalize_markup(markup)
    assert haystack is not None
    span = locate(haystack, normalize_query("せに"))
    assert span is not None
    projected = project_markup(markup, [span])
    assert projected == (
        "<ruby><rb>幸</rb><rt>しあわ</rt></ruby>"
        f'<span class="okurigana">{MARK}せ{END}</span>{MARK}に{END}'
    )
    _assert_well_formed(projected)


def test_markup_projection_never_touches_readings_by_default() -> None:
    markup = _ja("幸せ[しあわせ]に")
    projected = project_markup(markup, [MatchSpan(0, len(markup))])
    soup = BeautifulSoup(projected, "html.parser")
    assert soup.rt.find("mark") is None
    assert soup.rb.mark.get_text() == "幸"


def test_reading_group_match_highlights_base_and_reading() -> None:
    markup = _ja("幸せ[しあわせ]に暮[く]らし")
    groups = find_reading_groups(markup, normalize_query("シアワ"))
    assert groups == [MatchSpan(0, markup.index("</ruby>") + len("</ruby>"))]
    projected = project_markup(markup, groups, via_reading=True)
    assert projected.startswith(
        f"<ruby><rb>{MARK}幸{END}</rb><rt>{MARK}しあわ{END}</rt></ruby>"
        '<span class="okurigana">せ</span>'
    )
    assert "<rb>暮</rb><rt>く</rt>" in projected
    _assert_well_formed(projected)


def test_reading_groups_without_match() -> None:
    markup = _ja("幸せ[しあわせ]に")
    assert find_reading_groups(markup, "く") == []
    assert find_reading_groups(markup, "") == []
    assert find_reading_groups("<rt>", "く") == []


def test_mixed_match_spans_reading_and_visible_kana() -> None:
    markup = _ja("暮[く]らし")
    assert markup == "<ruby><rb>暮</rb><rt>く</rt></ruby>らし"
    span = locate_mixed(markup, normalize_query("くらし"))
    assert span == MatchSpan(0, len(markup))
    projected = project_markup(markup, [span], via_reading=True)
    assert projected == (
        f"<ruby><rb>{MARK}暮{END}</rb><rt>{MARK}く{END}</rt></ruby>{MARK}らし{END}"
    )


def test_mixed_match_missing() -> None:
    assert locate_mixed(_ja("暮[く]らし"), "たべ") is None


def test_character_references_are_wrapped_whole() -> None:
    markup = "A&amp;B"
    haystack = normalize_markup(markup)
    assert haystack is not None
    span = locate(haystack, "&")
    assert span == MatchSpan(1, 6)
    assert project_markup(markup, [span]) == f"A{MARK}&amp;{END}B"


def test_malformed_markup_is_returned_unchanged() -> None:
    assert project_markup("<rt>abc", [MatchSpan(0, 7)]) == "<rt>abc"
    assert project_markup("abc<b", [MatchSpan(0, 3)]) == "abc<b"


def test_no_spans_returns_markup() -> None:
    markup = _ja("幸せ[しあわせ]")
    assert project_markup(markup, []) == markup


def test_scan_records_groups_and_reading_containers() -> None:
    markup = "<ruby>漢<rp>(</rp><rt>かん</rt><rp>)</rp></ruby>字"
    scan = scan_markup(markup)
    assert scan is not None
    assert len(scan.groups) == 1
    assert scan.groups[0].end == markup.index("字")
    assert [ch.text for ch in scan.visible_chars() if not ch.in_reading] == ["漢", "字"]


def test_parenthesis_fallback_is_never_highlighted() -> None:
    markup = "<ruby>漢<rp>(</rp><rt>かん</rt><rp>)</rp></ruby>字"
    groups = find_reading_groups(markup, "かん")
    projected = project_markup(markup, groups, via_reading=True)
    assert projected == (
        f"<ruby>{MARK}漢{END}<rp>(</rp><rt>{MARK}かん{END}</rt><rp>)</rp></ruby>字"
    )


def test_partial_kana_spellings_find_their_group() -> None:
    markup = _ja("黒川[くろかわ]さん")
    span = MatchSpan(0, markup.index("</ruby>") + len("</ruby>"))
    assert find_partial_groups(markup, normalize_query("くろ川")) == [span]
    assert find_partial_groups(markup, normalize_query("黒カワ")) == [span]
    assert find_partial_groups(markup, "くろかわ") == []
    assert find_partial_groups(markup, "川ろ") == []


def test_partial_spellings_need_kanji_base_and_kana_reading() -> None:
    assert find_partial_groups(render(parse("北京[Běijīng]"), "zh"), "b京") == []
    assert find_partial_groups("<ruby><rb>食べ</rb><rt>たべ</rt></ruby>", "た食") == []


def test_scan_decodes_characters_once() -> None:
    scan = scan_markup(_ja("漢[かん]" * 3))
    assert scan is not None
    assert scan.chars is scan.chars
    assert [ch.text for ch in scan.group_chars(1, "rt")] == ["か", "ん"]
    assert [ch.text for ch in scan.group_chars(1, None)] == ["漢"]
    assert scan.group_chars(7, "rt") == []
