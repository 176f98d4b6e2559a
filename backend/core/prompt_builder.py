"""
Prompt builder — system prompts for fresh and follow-up SQL generation.
"""
import json

from models.display import QueryContext
from prompts.sql_generation import initial_query_prompt, followup_query_prompt

RESULT_EXCERPT_ROWS = 2


def build_initial_prompt(schema_text: str) -> str:
    return initial_query_prompt.format(schema_text=schema_text)


def _summarize_previous_displays(context: QueryContext) -> str:
    if not context.display:
        return "None"
    blocks = []
    for i, display in enumerate(context.display, start=1):
        excerpt = json.dumps((display.results or [])[:RESULT_EXCERPT_ROWS], default=str)
        blocks.append(
            f"### Display {i} ({display.type})\n"
            f"SQL:\n```sql\n{display.sql}\n```\n"
            f"Description: {display.description or 'n/a'}\n"
            f"Results excerpt: {excerpt}"
        )
    return "\n\n".join(blocks)


def build_followup_prompt(followup_instruction: str, context: QueryContext, schema_text: str) -> str:
    previous_query = context.query
    if context.explanation:
        previous_query += f"\n\nPrevious explanation: {context.explanation}"
    return followup_query_prompt.format(
        schema_text=schema_text,
        previous_query=previous_query,
        previous_displays=_summarize_previous_displays(context),
        followup_instruction=followup_instruction,
    )
