"""Human-readable rendering of pipeline errors.

Resolves the positional data each error carries into a line number, a short
excerpt of the surrounding source and, for parse errors, the tree of nested
failures.
"""

from .errors import (
    CompileError,
    JournalError,
    LexError,
    ParseError,
    describe_details,
)

EXCERPT_CONTEXT = 3
INDENT = "  "


def indent_string(text: str, prefix: str = INDENT) -> str:
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def locate(source: str, offset: int) -> tuple[int, int]:
    """1-based ``(line, column)`` of a character offset."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, column


def excerpt(source: str, line: int, context: int = EXCERPT_CONTEXT) -> str:
    """Lines around ``line`` (1-based), the target one marked with ``->``."""
    lines = source.split("\n")
    target = min(max(line, 1), len(lines)) - 1
    start = max(0, target - context)
    stop = min(len(lines), target + context + 1)

    out = []
    if start > 0:
        out.append("  ...")
    for i in range(start, stop):
        marker = "-> " if i == target else "   "
        out.append(f"{marker}{lines[i]}")
    if stop < len(lines):
        out.append("  ...")
    return "\n".join(out)


def format_parse_details(error: ParseError, depth: int = 0) -> str:
    """Render a parse error and its nested causes as an indented tree."""
    lines = [f"{INDENT * depth}- token {error.location}: {describe_details(error.details)}"]
    for inner in error.nested_errors:
        lines.append(format_parse_details(inner, depth + 1))
    return "\n".join(lines)


def _format_location(filename: str, source: str, offset: int) -> list[str]:
    line, column = locate(source, offset)
    return [
        f"{INDENT}{filename}:{line}:{column}",
        "",
        f"{INDENT}===========",
        indent_string(excerpt(source, line)),
        f"{INDENT}===========",
        "",
    ]


def format_error(error: JournalError, source: str, filename: str = "<string>") -> str:
    match error:
        case LexError():
            lines = ["Lex Error:", *_format_location(filename, source, error.location)]
            lines.append(f"{INDENT}{error.message}")
            if error.recent_tokens:
                recent = ", ".join(str(t.token) for t in error.recent_tokens)
                lines.append(f"{INDENT}after: {recent}")
            return "\n".join(lines)
        case ParseError():
            lines = ["Parse Error:"]
            offset = error.source_offset()
            if offset is not None:
                lines.extend(_format_location(filename, source, offset))
            lines.append(indent_string(format_parse_details(error)))
            return "\n".join(lines)
        case CompileError():
            where = f" (node {error.node_index})" if error.node_index is not None else ""
            return f"Compile Error{where}:\n{indent_string(error.message)}"
    return f"Error:\n{indent_string(str(error))}"
