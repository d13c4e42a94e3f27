from __future__ import annotations

import html
import re
from typing import Iterable

from .config import DEFAULT_CONFIG, RenderConfig
from .okurigana import split
from .scripts import canonical_language
from .tokens import AnnotatedRun, Token

__all__ = ["escape", "render", "render_ruby_group", "tighten_cjk_spacing"]

RUBY_OPEN = "<ruby>"
RUBY_CLOSE = "</ruby>"

_CJK_RANGE = "\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\u3040-\u30ff"
_GROUP_END = r"(?:</ruby>|</span>)"
_BETWEEN_GROUPS = re.compile(rf"({_GROUP_END})\s+(<ruby>)")
_CJK_BEFORE_GROUP = re.compile(rf"([{_CJK_RANGE}])\s+(<ruby>)")
_CJK_AFTER_GROUP = re.compile(rf"({_GROUP_END})\s+([{_CJK_RANGE}])")
_BEFORE_CLOSING_PUNCT = re.compile(r"\s+([、。．・，！!？?：:；;」』）］])")
_AFTER_OPENING_PUNCT = re.compile(r"([「『（［])\s+")


def escape(text: str) -> str:
    return html.escape(text, quote=True)


def render_ruby_group(base: str, reading: str) -> str:
    return f"{RUBY_OPEN}<rb>{escape(base)}</rb><rt>{escape(reading)}</rt>{RUBY_CLOSE}"


def _render_annotated(token: AnnotatedRun, language: str, config: RenderConfig) -> str:
    result = split(token.base, token.reading, language, config.kanji_languages)
    parts: list[str] = []
    if result.leading_text:
        parts.append(escape(result.leading_text))
    if result.prefix_kana:
        parts.append(escape(result.prefix_kana))
    parts.append(render_ruby_group(result.core, result.reading_core))
    if result.trailing_kana:
        parts.append(
            f'<span class="{escape(config.okurigana_class)}">{escape(result.trailing_kana)}</span>'
        )
    return "".join(parts)


def tighten_cjk_spacing(markup: str) -> str:
    """Remove whitespace that would show as gaps around ruby groups in CJK text."""
    out = markup.strip()
    out = _BETWEEN_GROUPS.sub(r"\1\2", out)
    out = _CJK_BEFORE_GROUP.sub(r"\1\2", out)
    out = _CJK_AFTER_GROUP.sub(r"\1\2", out)
    out = _BEFORE_CLOSING_PUNCT.sub(r"\1", out)
    out = _AFTER_OPENING_PUNCT.sub(r"\1", out)
    return out


def render(tokens: Iterable[Token], language: str | None = None, config: RenderConfig | None = None) -> str:
    """
    Serialize parsed subtitle tokens into escaped HTML with ruby groups.

    Plain runs are escaped verbatim. Annotated runs become
    ``<ruby><rb>…</rb><rt>…</rt></ruby>``, with okurigana split out for
    Kanji languages.
    """
    config = config or DEFAULT_CONFIG
    lang = canonical_language(language)
    parts: list[str] = []
    has_group = False
    for token in tokens:
        if isinstance(token, AnnotatedRun):
            parts.append(_render_annotated(token, lang, config))
            has_group = True
        else:
            parts.append(escape(token.text))
    markup = "".join(parts)
    if has_group and config.tighten_spacing and lang in config.cjk_languages:
        markup = tighten_cjk_spacing(markup)
    return markup
