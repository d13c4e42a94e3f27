from __future__ import annotations

import argparse
import json
import sys
from importlib import metadata
from pathlib import Path

import tomllib
from rich.console import Console
from rich.table import Table

from .config import DEFAULT_CONFIG, RenderConfig, load_render_config
from .engine import annotate_and_highlight
from .logging_utils import set_debug_logging
from .normalize import normalize_plain
from .okurigana import split
from .parser import parse
from .tokens import serialize_tokens


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("subruby")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"subruby {__version__}",
    )


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "text",
        nargs="*",
        help="Subtitle text. Reads stdin when omitted.",
    )
    parser.add_argument(
        "-l",
        "--lang",
        default="ja",
        help="Language code of the subtitle (default: ja).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print debug logging (split and highlight fallbacks) to stderr.",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="subruby",
        description=(
            "Render bracket-annotated subtitles as ruby HTML. "
            "Subcommands: render, normalize, split."
        ),
    )
    _add_version_flag(ap)
    return ap


def build_render_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="subruby render",
        description="Render subtitle text with base[reading] annotations and highlight a query.",
    )
    _add_version_flag(ap)
    _add_common_flags(ap)
    ap.add_argument("-q", "--query", help="Search query to highlight.")
    ap.add_argument(
        "--json",
        action="store_true",
        help="Print tokens and render metadata as JSON instead of markup.",
    )
    ap.add_argument(
        "--config",
        type=Path,
        help="TOML file with a [subruby] table of rendering options.",
    )
    return ap


def build_normalize_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="subruby normalize",
        description="Show the folded search form of subtitle text and its position map.",
    )
    _add_version_flag(ap)
    _add_common_flags(ap)
    return ap


def build_split_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="subruby split",
        description="Show how a base and its reading are split around okurigana.",
    )
    _add_version_flag(ap)
    ap.add_argument("base", help="Annotated base text, e.g. 食べる")
    ap.add_argument("reading", help="Reading of the base, e.g. たべる")
    ap.add_argument("-l", "--lang", default="ja", help="Language code (default: ja).")
    return ap


def _input_text(args: argparse.Namespace) -> str:
    if args.text:
        return " ".join(args.text)
    text = sys.stdin.read().rstrip("\n")
    if not text:
        raise SystemExit("No subtitle text provided.")
    return text


def _load_config(path: Path | None) -> RenderConfig:
    if path is None:
        return DEFAULT_CONFIG
    try:
        return load_render_config(path)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def _run_render(args: argparse.Namespace) -> int:
    set_debug_logging(args.debug)
    config = _load_config(args.config)
    text = _input_text(args)
    result = annotate_and_highlight(text, args.lang, args.query, config=config)
    if args.json:
        payload = {
            "language": result.language,
            "markup": result.markup,
            "highlighted": result.highlighted,
            "match_kind": result.match_kind,
            "spans": [[span.start, span.end] for span in result.spans],
            "tokens": serialize_tokens(parse(text)),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(result.markup)
    return 0


def _run_normalize(args: argparse.Namespace) -> int:
    set_debug_logging(args.debug)
    text = _input_text(args)
    normalized = normalize_plain(text)
    console = Console()
    console.print(normalized.text, markup=False, highlight=False)
    table = Table("unit", "char", "source", "offset")
    for idx, unit in enumerate(normalized.text):
        start = normalized.starts[idx]
        end = normalized.ends[idx]
        table.add_row(str(idx), unit, text[start:end], f"{start}:{end}")
    console.print(table)
    return 0


def _run_split(args: argparse.Namespace) -> int:
    result = split(args.base, args.reading, args.lang)
    print(
        json.dumps(
            {
                "strategy": result.strategy,
                "leading_text": result.leading_text,
                "prefix_kana": result.prefix_kana,
                "core": result.core,
                "reading_core": result.reading_core,
                "trailing_kana": result.trailing_kana,
            },
            ensure_ascii=False,
        )
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "render":
        render_args = build_render_parser().parse_args(argv[1:])
        return _run_render(render_args)
    if argv and argv[0] == "normalize":
        normalize_args = build_normalize_parser().parse_args(argv[1:])
        return _run_normalize(normalize_args)
    if argv and argv[0] == "split":
        split_args = build_split_parser().parse_args(argv[1:])
        return _run_split(split_args)

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0
    parser.parse_args(argv)
    parser.error(f"unknown command: {argv[0]}")
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
