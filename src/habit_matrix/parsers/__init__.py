from .annotations import DEFAULT_GLYPHS, Annotations, Glyphs, content_prefix, lex
from .task_parser import is_open_task_line, parse_line, scan_content

__all__ = [
    "DEFAULT_GLYPHS",
    "Annotations",
    "Glyphs",
    "content_prefix",
    "lex",
    "is_open_task_line",
    "parse_line",
    "scan_content",
]
