from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from .scripts import CJK_LANGUAGES, KANJI_LANGUAGES

__all__ = ["DEFAULT_CONFIG", "RenderConfig", "config_from_mapping", "load_render_config"]

CONFIG_TABLE = "subruby"


@dataclass(frozen=True)
class RenderConfig:
    highlight_tag: str = "mark"
    highlight_class: str = "highlight"
    okurigana_class: str = "okurigana"
    cjk_languages: frozenset[str] = CJK_LANGUAGES
    kanji_languages: frozenset[str] = KANJI_LANGUAGES
    tighten_spacing: bool = True

    @property
    def highlight_open(self) -> str:
        if self.highlight_class:
            return f'<{self.highlight_tag} class="{self.highlight_class}">'
        return f"<{self.highlight_tag}>"

    @property
    def highlight_close(self) -> str:
        return f"</{self.highlight_tag}>"

    def is_cjk(self, language: str) -> bool:
        return language in self.cjk_languages


DEFAULT_CONFIG = RenderConfig()

_STRING_KEYS = {"highlight_tag", "highlight_class", "okurigana_class"}
_LANGUAGE_KEYS = {"cjk_languages", "kanji_languages"}
_BOOL_KEYS = {"tighten_spacing"}
_RUBY_TAGS = {"ruby", "rb", "rt", "rp"}


def config_from_mapping(raw: Mapping[str, Any], *, source: str = "config") -> RenderConfig:
    known = {f.name for f in fields(RenderConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown keys in {source}: {', '.join(unknown)}")
    values: dict[str, object] = {}
    for key, value in raw.items():
        if key in _STRING_KEYS:
            if not isinstance(value, str):
                raise ValueError(f"{source}: '{key}' must be a string.")
            if key == "highlight_tag" and (not value.isalnum() or value.lower() in _RUBY_TAGS):
                raise ValueError(f"{source}: 'highlight_tag' must be a bare tag name outside ruby markup.")
            if '"' in value or "<" in value or ">" in value:
                raise ValueError(f"{source}: '{key}' contains markup characters.")
            values[key] = value
        elif key in _LANGUAGE_KEYS:
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise ValueError(f"{source}: '{key}' must be an array of language codes.")
            values[key] = frozenset(item.strip().lower() for item in value if item.strip())
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise ValueError(f"{source}: '{key}' must be true or false.")
            values[key] = value
    return replace(DEFAULT_CONFIG, **values)


def load_render_config(path: Path) -> RenderConfig:
    """
    Read rendering options from a TOML file.

    Options live in a ``[subruby]`` table, or at the top level when the file
    has no such table.
    """
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ValueError(f"Failed to parse config file: {path}") from exc
    table = data.get(CONFIG_TABLE, data)
    if not isinstance(table, dict):
        raise ValueError(f"{path.name}: [{CONFIG_TABLE}] must be a table.")
    return config_from_mapping(table, source=path.name)
