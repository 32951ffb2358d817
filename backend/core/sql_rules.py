"""
SQL safety rules — regex denylist, statement allowlist and JOIN structure checks.

This is a heuristic, defense-in-depth filter, not a parser. It can reject a
legitimate statement whose string literal contains a forbidden keyword, and it
can miss obfuscated injection. Both are known limits of the approach.
"""
import re

from core.exceptions import UnsafeStatementError

# (pattern, reason), searched case-insensitively anywhere in the statement
DENYLIST: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b(DROP|TRUNCATE|GRANT|REVOKE|SHUTDOWN)\b", re.IGNORECASE),
     "DDL/DCL keyword"),
    (re.compile(r"\b(CREATE|ALTER)\s+TABLE\b", re.IGNORECASE),
     "DDL keyword"),
    (re.compile(r";\s*(--|#|/\*)"),
     "comment-based statement terminator"),
    (re.compile(r"\bUNION\s+(ALL\s+)?SELECT\b", re.IGNORECASE),
     "UNION-based injection pattern"),
    (re.compile(r"\bEXEC(UTE)?\s*\(|\bxp_cmdshell\b|\bsp_executesql\b", re.IGNORECASE),
     "dynamic execution"),
    (re.compile(r"\bINTO\s+(OUTFILE|DUMPFILE)\b|\bLOAD_FILE\s*\(", re.IGNORECASE),
     "file read/write primitive"),
]

ALLOWED_STATEMENT = re.compile(r"^\s*(SELECT|INSERT|UPDATE|DELETE)\b", re.IGNORECASE)

_JOIN = re.compile(r"\bJOIN\b", re.IGNORECASE)
_TABLE_REF = r"[\w.`\"\[\]]+"
_JOIN_WITH_ALIAS = re.compile(
    rf"JOIN\s+{_TABLE_REF}\s+(?:AS\s+)?(?P<alias>\w+)\s+ON\b", re.IGNORECASE
)
_JOIN_WITHOUT_ALIAS = re.compile(rf"JOIN\s+{_TABLE_REF}\s+ON\b", re.IGNORECASE)
_NOT_AN_ALIAS = {"ON", "WHERE", "USING", "JOIN", "AS", "GROUP", "ORDER", "LIMIT"}


def check_denylist(sql: str) -> None:
    for pattern, reason in DENYLIST:
        if pattern.search(sql):
            raise UnsafeStatementError(f"Potentially dangerous operation detected ({reason})")


def check_allowlist(sql: str) -> None:
    if not ALLOWED_STATEMENT.match(sql):
        head = sql.strip().split(None, 1)
        raise UnsafeStatementError(f"Invalid SQL statement type: {head[0].upper() if head else '<empty>'}")


def check_joins(sql: str) -> None:
    """Every JOIN needs a table reference, an explicit alias and an ON clause."""
    for m in _JOIN.finditer(sql):
        tail = sql[m.start():]
        aliased = _JOIN_WITH_ALIAS.match(tail)
        if aliased and aliased.group("alias").upper() not in _NOT_AN_ALIAS:
            continue
        if _JOIN_WITHOUT_ALIAS.match(tail):
            raise UnsafeStatementError("JOIN tables should use explicit aliases")
        raise UnsafeStatementError("Invalid JOIN syntax: JOIN must be followed by a table name and ON condition")


def validate_statement(sql: str) -> str:
    """
    Return the cleaned statement or raise UnsafeStatementError.
    A single trailing semicolon is dropped; anything after it is not.
    """
    statement = sql.strip()
    if not statement:
        raise UnsafeStatementError("Empty query")
    check_denylist(statement)
    statement = statement.rstrip().rstrip(";").rstrip()
    check_allowlist(statement)
    check_joins(statement)
    return statement
