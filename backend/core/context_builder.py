"""
Context builder — renders selected tables as a schema description for the
prompting agent, followed by fixed query-generation guidelines.
Output is deterministic for a given input.
"""
from typing import Mapping, Optional

from models.schema import TableSchema

GUIDELINES = """\
# Query Generation Guidelines

1. Select explicit columns; never use SELECT *
2. Use INNER JOIN for required relationships, LEFT JOIN for optional ones
3. Always give joined tables an alias and join them with an ON condition
4. Add LIMIT 10 to any SELECT that does not request a specific range
5. Use named (:param) or positional (?) placeholders instead of literal values
6. Include ORDER BY when the request implies a sort order
"""


def _format_default(value) -> str:
    if isinstance(value, str):
        # Reflected defaults are often already-quoted SQL expressions
        if value.startswith("'") or value.upper() in ("CURRENT_TIMESTAMP", "NULL") or value.endswith(")"):
            return value
        return f"'{value}'"
    return str(value)


def render_table(name: str, table: TableSchema) -> str:
    lines = [f"## Table: `{name}`", ""]
    if not table.columns:
        lines.append("*No columns found*")
        return "\n".join(lines) + "\n"

    pk = set(table.primary_key)
    lines.append("### Columns")
    for col_name, col in table.columns.items():
        flags = ["NULL" if col.nullable else "NOT NULL"]
        if col.default is not None:
            flags.append(f"DEFAULT {_format_default(col.default)}")
        if col_name in pk:
            flags.append("PRIMARY KEY")
        if col.extra and col.extra.lower() in ("auto_increment", "identity"):
            flags.append("AUTO_INCREMENT")
        lines.append(f"- `{col_name}`: {col.type} {' '.join(flags)}")

    if table.primary_key:
        lines += ["", "### Primary Key", "- " + ", ".join(table.primary_key)]

    if table.foreign_keys:
        lines += ["", "### Foreign Keys"]
        for col_name, ref in table.foreign_keys.items():
            lines.append(f"- `{col_name}` → `{ref.foreign_table}`.`{ref.foreign_column}`")

    if table.indexes:
        lines += ["", "### Indexes"]
        for idx_name, idx in table.indexes.items():
            kind = "UNIQUE INDEX" if idx.unique else "INDEX"
            cols = "`, `".join(idx.columns)
            lines.append(f"- {kind} `{idx_name}` (`{cols}`)")

    return "\n".join(lines) + "\n"


def render_context(tables: Mapping[str, TableSchema], max_chars: Optional[int] = None) -> str:
    """
    Render tables in the given order. When max_chars is set, tables that
    would push the schema section past it are listed by name only.
    """
    parts = ["# Database Schema", ""]
    used = len("\n".join(parts))
    omitted: list[str] = []
    for name, table in tables.items():
        block = render_table(name, table) + "\n---\n"
        if max_chars and omitted:
            omitted.append(name)
            continue
        if max_chars and used + len(block) > max_chars and len(parts) > 2:
            omitted.append(name)
            continue
        parts.append(block)
        used += len(block) + 1

    if omitted:
        parts.append("Tables omitted for length: " + ", ".join(omitted) + "\n")
    parts.append(GUIDELINES)
    return "\n".join(parts)
