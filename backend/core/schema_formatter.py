"""
Schema formatter — renders a DatabaseSchema as compact markdown for model grounding.
Pure function of its input; identical schemas always render identically.
"""
from models.schema import DatabaseSchema, DatabaseColumn


def _format_column(col: DatabaseColumn) -> str:
    line = f"- {col.name}: {col.type}"
    if col.udt_name and col.udt_name != col.type:
        line += f" ({col.udt_name})"
    if not col.nullable:
        line += " NOT NULL"
    if col.default_value:
        line += f" DEFAULT {col.default_value}"
    if col.is_primary_key:
        line += " [PRIMARY KEY]"
    if col.is_foreign_key:
        line += f" [FOREIGN KEY → {col.foreign_table}.{col.foreign_column}]"
    return line


def format_schema_for_ai(schema: DatabaseSchema) -> str:
    lines: list[str] = []

    if schema.enums:
        lines.append("## Enums (Custom Types)")
        for enum in schema.enums:
            lines.append(f"- {enum.name}: {', '.join(enum.values)}")
        lines.append("")

    lines.append("## Tables")
    for table in schema.tables:
        rows = table.row_count if table.row_count is not None else "unknown"
        lines.append(f"### {table.name} ({rows} rows)")
        lines.append("#### Columns:")
        lines.extend(_format_column(col) for col in table.columns)
        lines.append("")

    return "\n".join(lines) + "\n"
