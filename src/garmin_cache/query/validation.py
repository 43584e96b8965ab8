"""Lexical validation of caller-supplied queries.

``validate_query`` runs every check that can be made without touching the
database and returns the single statement to execute. Each failure raises
``QueryRejected`` with its own reason so callers can tell them apart.
"""

import re

from garmin_cache.constants import (
    QUERY_ALLOWED_PREFIXES,
    QUERY_FORBIDDEN_KEYWORDS,
    QUERY_MAX_CHARS,
)
from garmin_cache.exceptions import QueryRejected, QueryRejectionReason

STATEMENT_TERMINATOR = ";"

_READ_PREFIX_RE = re.compile(
    r"^(?:" + "|".join(QUERY_ALLOWED_PREFIXES) + r")\b", re.IGNORECASE
)
_FORBIDDEN_RE = re.compile(
    r"\b(" + "|".join(QUERY_FORBIDDEN_KEYWORDS) + r")\b", re.IGNORECASE
)

# Quoted literals and identifiers, plus comments. Matched left to right so a
# quote inside a comment (or a comment marker inside a quote) is handled correctly.
_LITERAL_OR_COMMENT_RE = re.compile(
    r"""
    '(?:''|[^'])*'          # 'string', '' escapes
    | "(?:""|[^"])*"        # "identifier"
    | `(?:``|[^`])*`        # `identifier`
    | \[[^\]]*\]            # [identifier]
    | --[^\n]*              # line comment
    | /\*.*?(?:\*/|\Z)      # block comment, possibly unterminated
    """,
    re.VERBOSE | re.DOTALL,
)

_EMPTY_LITERALS = {"'": "''", '"': '""', "`": "``", "[": "[]"}


def scrub_literals(statement: str) -> str:
    """Blank out quoted literals and strip comments.

    Keywords that only appear inside a string or a quoted identifier
    (``WHERE description = 'DELETE this later'``) must not trigger the
    keyword scan; comments are dropped for the same reason.
    """

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        placeholder = _EMPTY_LITERALS.get(token[0])
        return placeholder if placeholder is not None else " "

    return _LITERAL_OR_COMMENT_RE.sub(_replace, statement)


def strip_trailing_terminator(statement: str) -> str:
    """Remove one trailing statement terminator and surrounding whitespace."""
    stripped = statement.rstrip()
    if stripped.endswith(STATEMENT_TERMINATOR):
        stripped = stripped[: -len(STATEMENT_TERMINATOR)].rstrip()
    return stripped


def validate_query(text: str, max_chars: int = QUERY_MAX_CHARS) -> str:
    """Validate a query and return the statement to execute.

    Args:
        text: Caller-supplied query.
        max_chars: Maximum accepted length after trimming.

    Returns:
        The trimmed statement without its trailing terminator.

    Raises:
        QueryRejected: If any check fails.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        raise QueryRejected("Query cannot be empty.", QueryRejectionReason.EMPTY)

    if len(trimmed) > max_chars:
        raise QueryRejected(
            f"Query too large (max {max_chars} characters).", QueryRejectionReason.TOO_LARGE
        )

    statement = strip_trailing_terminator(trimmed)
    if STATEMENT_TERMINATOR in statement:
        raise QueryRejected(
            "Only a single SELECT statement is allowed.",
            QueryRejectionReason.MULTIPLE_STATEMENTS,
        )

    if not _READ_PREFIX_RE.match(statement):
        raise QueryRejected(
            "Only SELECT queries are allowed (statement must start with SELECT or WITH).",
            QueryRejectionReason.NOT_SELECT,
        )

    match = _FORBIDDEN_RE.search(scrub_literals(statement))
    if match:
        keyword = match.group(1).upper()
        raise QueryRejected(
            f"Forbidden keyword '{keyword}' detected. Only read-only queries are allowed.",
            QueryRejectionReason.FORBIDDEN_KEYWORD,
            keyword=keyword,
        )

    return statement
