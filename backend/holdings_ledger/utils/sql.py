# backend/holdings_ledger/utils/sql.py
"""
SQL query helpers.

Usage:
    from holdings_ledger.utils.sql import contains_pattern

    query = query.where(Holding.name.ilike(contains_pattern(term), escape="\\"))
"""

LIKE_ESCAPE_CHAR = "\\"


def escape_like_pattern(value: str) -> str:
    """
    Escape LIKE wildcards so user input matches literally.

    The escape character itself goes first, otherwise the backslashes added
    for % and _ would be escaped a second time.

    Example:
        >>> escape_like_pattern("50% off")
        '50\\\\% off'
    """
    return (
        value
        .replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace("%", LIKE_ESCAPE_CHAR + "%")
        .replace("_", LIKE_ESCAPE_CHAR + "_")
    )


def contains_pattern(term: str) -> str:
    """Build a '%term%' pattern for a substring search on trimmed input."""
    return f"%{escape_like_pattern(term.strip())}%"
