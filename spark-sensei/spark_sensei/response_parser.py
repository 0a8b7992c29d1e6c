"""
Response Parser

Turns the free-form text returned by a vision model into an AnalysisResult.

Models are asked to answer in four marked sections:

    🛑 DIAGNOSIS: ...
    🔍 DETAILS: ...
    💡 THE FIX: ...
    🎓 SENSEI'S NOTE: ...

In practice replies drift: markers get dropped or replaced by markdown
headings, labels change case, sections move around. Headers carrying one of
the marker emoji are recognized anywhere in the text. Unmarked headers are
recognized only at the start of a line, and only for sections that have no
marked header, so a "- Note:" bullet inside DETAILS does not split a reply
that was otherwise well formed. Nothing inside a fenced code block is ever
taken for a header.
"""

import re
from typing import Optional

from .models import PARSE_FAILURE_PREFIX, AnalysisResult

FIELDS = ("diagnosis", "details", "fix", "note")

_MARKER = "[\U0001F6D1\U0001F50D\U0001F4A1\U0001F393]\ufe0f?"
_BOLD = r"(?:\*\*|__)"
# Markdown decoration allowed in front of a header at the start of a line
_LINE_PREFIX = rf"^[ \t]*(?:[#>*\-•][ \t]*)*(?:\d+[.)][ \t]*)?{_BOLD}?[ \t]*"
_LABEL = (
    r"(?:(?P<diagnosis>DIAGNOSIS)"
    r"|(?P<details>DETAILS)"
    r"|(?P<fix>(?:THE[ \t]+)?FIX)"
    r"|(?P<note>(?:SENSEI(?:['’`]?S)?[ \t]+)?NOTE))"
)
# Label must be followed by a colon, or stand alone on its line.
_TERMINATOR = rf"[ \t]*{_BOLD}?[ \t]*(?::|(?=[ \t]*\r?$))[ \t]*{_BOLD}?"

MARKED_HEADER = re.compile(
    rf"(?:{_LINE_PREFIX})?{_MARKER}[ \t]*{_BOLD}?[ \t]*{_LABEL}{_TERMINATOR}",
    re.IGNORECASE | re.MULTILINE,
)

LINE_HEADER = re.compile(
    rf"{_LINE_PREFIX}(?:{_MARKER}[ \t]*)?{_LABEL}{_TERMINATOR}",
    re.IGNORECASE | re.MULTILINE,
)

_FENCE_LINE = re.compile(r"^[ \t]*```[ \t]*(?P<info>[^\s`]*).*$", re.MULTILINE)
_FENCED_REPLY = re.compile(r"\A```[\w-]*[ \t]*\r?\n(?P<body>.*?)\r?\n?```\Z", re.DOTALL)
_TRAILING_RULES = re.compile(r"(?:\n[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*)+\Z")


def parse_analysis_response(response: Optional[str]) -> AnalysisResult:
    """
    Extract the four critique sections from a model reply.

    Never raises: sections that cannot be found come back as
    "Unable to parse <field>" placeholders and the untouched reply is kept
    in raw_response.

    Args:
        response: Raw reply text from any provider

    Returns:
        AnalysisResult with diagnosis, details, fix and note filled in

    Example:
        result = parse_analysis_response(text)
        if not result.is_complete:
            print(result.raw_response)
    """
    raw = response or ""
    sections = extract_sections(_unwrap_fence(raw.strip()))

    values = {
        field: sections.get(field) or f"{PARSE_FAILURE_PREFIX} {field}"
        for field in FIELDS
    }
    return AnalysisResult(raw_response=raw, **values)


def extract_sections(text: str) -> dict[str, str]:
    """
    Split text on recognized section headers.

    Args:
        text: Reply text

    Returns:
        Mapping of field name to cleaned body for every section found.
        When a section repeats, the first occurrence with a
        non-empty body wins; empty bodies are left out.
    """
    headers = _find_headers(text)

    sections: dict[str, str] = {}
    for i, (field, _start, end) in enumerate(headers):
        if field in sections:
            continue
        stop = headers[i + 1][1] if i + 1 < len(headers) else len(text)
        body = _clean_body(text[end:stop])
        if body:
            sections[field] = body

    return sections


def _find_headers(text: str) -> list[tuple[str, int, int]]:
    """Locate headers as (field, start, end), ordered by position"""
    code = _code_spans(text)

    def in_code(pos: int) -> bool:
        return any(start < pos < end for start, end in code)

    headers = [
        (m.lastgroup, m.start(), m.end())
        for m in MARKED_HEADER.finditer(text)
        if not in_code(m.start())
    ]
    marked_fields = {field for field, _, _ in headers}

    for m in LINE_HEADER.finditer(text):
        if m.lastgroup in marked_fields or in_code(m.start()):
            continue
        # Skip line headers that merely wrap a marked header already found
        if any(start <= m.start() < end or m.start() <= start < m.end() for _, start, end in headers):
            continue
        headers.append((m.lastgroup, m.start(), m.end()))

    headers.sort(key=lambda header: header[1])
    return headers


def _code_spans(text: str) -> list[tuple[int, int]]:
    """
    Spans of fenced code blocks as (start, end).

    A fence with a language tag always opens a block, a bare fence closes
    the innermost open one. An unclosed block runs to the end of the text.
    """
    spans = []
    depth = 0
    start = 0
    for m in _FENCE_LINE.finditer(text):
        if depth and not m.group("info"):
            depth -= 1
            if not depth:
                spans.append((start, m.end()))
            continue
        if not depth:
            start = m.start()
        depth += 1

    if depth:
        spans.append((start, len(text)))
    return spans


def _unwrap_fence(text: str) -> str:
    """Drop a code fence that wraps the entire reply"""
    match = _FENCED_REPLY.match(text)
    if match and _code_spans(text) == [(0, len(text))]:
        return match.group("body")
    return text


def _clean_body(body: str) -> str:
    """Trim whitespace, trailing horizontal rules and dangling bold markers"""
    body = _TRAILING_RULES.sub("", body.strip()).strip()

    for marker in ("**", "__"):
        if body.count(marker) % 2:
            if body.startswith(marker):
                body = body[len(marker):].lstrip()
            elif body.endswith(marker):
                body = body[: -len(marker)].rstrip()

    return body
