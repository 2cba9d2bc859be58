"""
Semantic version helpers used by the chart index.

Parsing is lenient the way chart repositories expect: a leading "v" is
accepted and a missing minor/patch component counts as zero, so "1.0",
"v1.0" and "1.0.0" are all the same version. Build metadata never takes part
in equality or ordering.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from semver import Version

from .errors import InvalidVersion


_CLAUSE_RE = re.compile(r"^\s*(>=|<=|==|!=|=|>|<)?\s*(\S+)\s*$")

_OPERATORS: Dict[str, Callable[[int], bool]] = {
    "==": lambda c: c == 0,
    "=": lambda c: c == 0,
    "!=": lambda c: c != 0,
    ">": lambda c: c > 0,
    ">=": lambda c: c >= 0,
    "<": lambda c: c < 0,
    "<=": lambda c: c <= 0,
}


def parse_version(value: object) -> Version:
    """
    Parse a version string into a semver Version.

    Raises InvalidVersion if the value is not a string or is not a valid
    semantic version.
    """
    if not isinstance(value, str):
        raise InvalidVersion(value, "version must be a string")

    text = value.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]

    try:
        return Version.parse(text, optional_minor_and_patch=True)
    except ValueError as e:
        raise InvalidVersion(value, str(e)) from e


def try_parse_version(value: object) -> Optional[Version]:
    """Like parse_version() but returns None instead of raising."""
    try:
        return parse_version(value)
    except InvalidVersion:
        return None


def versions_equal(left: Version, right: Version) -> bool:
    return left.compare(right) == 0


def is_constraint(expression: str) -> bool:
    """True if the expression starts with a comparison operator."""
    return expression.lstrip()[:1] in ("<", ">", "=", "!")


def matches_constraint(version: Version, expression: str) -> bool:
    """
    Check a version against a comparison expression.

    The expression is one or more comma separated clauses such as
    ">=1.2.0, <2.0.0"; all clauses must hold. A clause without an operator
    means equality.
    """
    clauses: List[str] = [c for c in expression.split(",") if c.strip()]
    if not clauses:
        raise InvalidVersion(expression, "empty constraint")

    for clause in clauses:
        match = _CLAUSE_RE.match(clause)
        if match is None:
            raise InvalidVersion(expression, f"cannot parse clause {clause.strip()!r}")
        operator = match.group(1) or "=="
        bound = parse_version(match.group(2))
        if not _OPERATORS[operator](version.compare(bound)):
            return False
    return True
