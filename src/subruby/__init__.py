from .config import RenderConfig, load_render_config
from .engine import AnnotationInputError, RenderResult, annotate_and_highlight
from .highlight import find_partial_groups, find_reading_groups, locate_mixed, project_markup, project_plain
from .locate import MatchSpan, locate, locate_casefold, locate_plain
from .normalize import NormalizedText, normalize_markup, normalize_plain, normalize_query
from .okurigana import split
from .parser import parse
from .render import render
from .tokens import AnnotatedRun, PlainRun, SplitResult

__all__ = [
    "annotate_and_highlight",
    "RenderResult",
    "AnnotationInputError",
    "RenderConfig",
    "load_render_config",
    "parse",
    "PlainRun",
    "AnnotatedRun",
    "split",
    "SplitResult",
    "render",
    "normalize_plain",
    "normalize_markup",
    "normalize_query",
    "NormalizedText",
    "locate",
    "locate_plain",
    "locate_casefold",
    "MatchSpan",
    "project_plain",
    "project_markup",
    "find_reading_groups",
    "find_partial_groups",
    "locate_mixed",
]
