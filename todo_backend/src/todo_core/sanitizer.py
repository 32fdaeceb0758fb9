"""
Input sanitization and validation for todo titles and generic text fields.

The SQL and XSS checks below are heuristic pattern matches run against the raw
input. They catch well-known attack shapes only; they are a best-effort filter
layer, not a security boundary, and both false negatives and false positives
are expected.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Pattern

from .models import MAX_TITLE_LENGTH

_HTML_ESCAPE_MAP: Dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}

_FORBIDDEN_CHARS = re.compile(r"[<>\"'&]")

_SQL_PATTERNS: List[Pattern[str]] = [
    # keyword followed by a comment marker, e.g. "DROP TABLE x --"
    re.compile(
        r"\b(SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|EXEC|EXECUTE|UNION)\b.*(--|/\*|\*/)",
        re.IGNORECASE,
    ),
    # chained statement, e.g. "x; DROP TABLE todos"
    re.compile(r";\s*(SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|EXEC|EXECUTE)\b", re.IGNORECASE),
    # tautology, e.g. "' OR '1'='1"
    re.compile(r"\b(OR|AND)\b.*['\"]", re.IGNORECASE),
]

_XSS_PATTERNS: List[Pattern[str]] = [
    re.compile(r"<script\b", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"\bon\w+\s*=", re.IGNORECASE),
    re.compile(r"<(iframe|object|embed|form)\b", re.IGNORECASE),
    re.compile(r"expression\s*\(", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
]

TITLE_NOT_STRING = "Todo title must be a string."
TITLE_REQUIRED = "Todo title is required."
TITLE_WHITESPACE_ONLY = "Todo title must not consist of whitespace only."
TITLE_TOO_LONG = f"Todo title must be at most {MAX_TITLE_LENGTH} characters."
TITLE_FORBIDDEN_CHARS = "Todo title contains characters that are not allowed."
TITLE_SQL_PATTERN = "Todo title contains a disallowed SQL-like sequence."
XSS_PATTERN_ERROR = "Input contains a disallowed script or markup pattern."
XSS_PATTERN_WARNING = "Potential XSS pattern detected."

INPUT_NOT_STRING = "Input must be a string."
INPUT_REQUIRED = "Input is required."
INPUT_UNPROCESSABLE = "Input contains only characters that cannot be processed."


@dataclass(frozen=True)
class TitleValidation:
    """
    Result of validating a todo title.
    """
    is_valid: bool
    sanitized_title: str
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class InputValidation:
    """
    Result of generic input validation. `security_warnings` are diagnostic only;
    anything in `errors` blocks submission.
    """
    is_valid: bool
    sanitized_value: str
    errors: List[str] = field(default_factory=list)
    security_warnings: List[str] = field(default_factory=list)


# PUBLIC_INTERFACE
def escape_html(text: str) -> str:
    """Replace the reserved HTML characters with their entities, character by character."""
    return "".join(_HTML_ESCAPE_MAP.get(ch, ch) for ch in text)


# PUBLIC_INTERFACE
def sanitize(text: Any) -> str:
    """
    Trim surrounding whitespace and HTML-escape the result.

    Non-string input sanitizes to an empty string.
    """
    if not isinstance(text, str):
        return ""
    return escape_html(text.strip())


# PUBLIC_INTERFACE
def detect_xss_patterns(text: str) -> bool:
    """Return True if any known script/markup injection shape appears in text."""
    return any(p.search(text) for p in _XSS_PATTERNS)


# PUBLIC_INTERFACE
def detect_sql_patterns(text: str) -> bool:
    """Return True if any known SQL injection shape appears in text."""
    return any(p.search(text) for p in _SQL_PATTERNS)


# PUBLIC_INTERFACE
def validate_title(raw: Any) -> TitleValidation:
    """
    Validate and sanitize a todo title.

    Checks, in order:
    - type: non-string input fails immediately with a single error
    - emptiness: empty and whitespace-only input get distinct errors
    - length: the sanitized (trimmed and escaped) title must be 1..30 characters,
      so the stored title never exceeds the bound
    - forbidden characters: any of < > " ' & in the raw text
    - SQL and XSS heuristics against the raw text

    Returns:
        TitleValidation with the sanitized title and every error found.
    """
    if not isinstance(raw, str):
        return TitleValidation(is_valid=False, sanitized_title="", errors=[TITLE_NOT_STRING])

    errors: List[str] = []
    trimmed = raw.strip()
    sanitized = escape_html(trimmed)

    if raw == "":
        errors.append(TITLE_REQUIRED)
    elif trimmed == "":
        errors.append(TITLE_WHITESPACE_ONLY)
    elif len(sanitized) > MAX_TITLE_LENGTH:
        errors.append(TITLE_TOO_LONG)

    if _FORBIDDEN_CHARS.search(raw):
        errors.append(TITLE_FORBIDDEN_CHARS)

    if detect_sql_patterns(raw):
        errors.append(TITLE_SQL_PATTERN)

    if detect_xss_patterns(raw):
        errors.append(XSS_PATTERN_ERROR)

    return TitleValidation(is_valid=not errors, sanitized_title=sanitized, errors=errors)


# PUBLIC_INTERFACE
def comprehensive_input_validation(value: Any, max_length: int = MAX_TITLE_LENGTH) -> InputValidation:
    """
    Generic validation for free-text fields.

    Args:
        value: The raw input.
        max_length: Maximum length of the sanitized value.

    Returns:
        InputValidation. A detected XSS pattern produces both a security warning
        and a blocking error.
    """
    if not isinstance(value, str):
        return InputValidation(is_valid=False, sanitized_value="", errors=[INPUT_NOT_STRING])

    errors: List[str] = []
    warnings: List[str] = []

    if detect_xss_patterns(value):
        warnings.append(XSS_PATTERN_WARNING)
        errors.append(XSS_PATTERN_ERROR)

    sanitized = sanitize(value)

    if not sanitized and value:
        errors.append(INPUT_UNPROCESSABLE)
    elif not sanitized:
        errors.append(INPUT_REQUIRED)
    elif len(sanitized) > max_length:
        errors.append(f"Input must be at most {max_length} characters.")

    return InputValidation(
        is_valid=not errors,
        sanitized_value=sanitized,
        errors=errors,
        security_warnings=warnings,
    )


# PUBLIC_INTERFACE
def sanitize_form_data(form_data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of form_data with every string value sanitized."""
    return {k: sanitize(v) if isinstance(v, str) else v for k, v in form_data.items()}
