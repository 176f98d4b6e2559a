"""
LangChain prompt templates for SQL generation.
Literal JSON braces are doubled so PromptTemplate leaves them alone.
"""
from langchain_core.prompts import PromptTemplate

# ── Shared output contract ────────────────────────────────────────────────────

OUTPUT_FORMAT_SECTION = """\
## Output Format Specification
Return ONLY valid JSON with this structure:
```json
{{
  "display": [
    {{
      "type": "table|stat|chart",
      "sql": "SELECT ... FROM ...\\nLEFT JOIN ...;"
    }}
  ],
  "explanation": "Optional short explanation of the approach"
}}
```
Every display object MUST carry its own single SQL statement in "sql".
Never share one query between several display objects.

### Visualization Types

#### 1. Data Tables
```json
{{
  "type": "table",
  "sql": "",
  "columns": {{
    "database_column": "User-Friendly Label",
    "another_column": "Another Label"
  }},
  "description": "What this table shows"
}}
```

#### 2. Statistical Metrics
```json
{{
  "type": "stat",
  "sql": "",
  "id": "column id from SQL",
  "name": "Title of stat card",
  "unit": "Optional unit (e.g. '%', '$')",
  "description": "What this metric represents"
}}
```

#### 3. Charts
```json
{{
  "type": "chart",
  "chartType": "bar|line|pie|scatter",
  "title": "Chart Title",
  "sql": "",
  "xAxis": {{
    "column": "x_axis_column_name",
    "label": "X-Axis Label"
  }},
  "yAxis": {{
    "column": "y_axis_column_name",
    "label": "Y-Axis Label"
  }},
  "category": {{
    "column": "optional_series_column",
    "label": "Optional Series Label"
  }},
  "description": "What this chart visualizes"
}}
```
Allowed display types are exactly: table, stat, chart.

## SQL Best Practices
- Use joins based on foreign keys.
- Handle NULLs (COALESCE, IS NULL).
- Use aliases.
- Add ORDER BY.
- Read-only queries only (SELECT / WITH).
"""

# ── Fresh query ───────────────────────────────────────────────────────────────

INITIAL_QUERY_TEMPLATE = """\
# SQL Query Generator

You are an expert SQL engineer. Translate natural language requests into optimized SQL queries.

## Database Schema
```
{schema_text}
```

## Core Workflow
1. Analyze Request: Identify tables, joins, conditions.
2. Sample Data: MUST call `sampleTable(tableName, numRows = 5)` for relevant tables before writing SQL to understand structure, types, relationships (NULLs, keys, ranges).
3. Generate SQL: Create one optimized SQL query for each visualization.
4. Recommend Visualizations: Suggest appropriate displays (table, stat, chart).
5. Return JSON Response: Output ONLY valid JSON matching the specified structure below. No prose outside the JSON.

""" + OUTPUT_FORMAT_SECTION + """
Remember: Output ONLY valid JSON."""

initial_query_prompt = PromptTemplate(
    input_variables=["schema_text"],
    template=INITIAL_QUERY_TEMPLATE,
)

# ── Follow-up on a previous result set ───────────────────────────────────────

FOLLOWUP_QUERY_TEMPLATE = """\
# SQL Query Generator — Follow-up

You are an expert SQL engineer. The user already received results for a previous request
and now wants to amend them. Produce the complete, updated set of displays.

## Database Schema
```
{schema_text}
```

## Previous Request
{previous_query}

## Previous Displays
{previous_displays}

## Follow-up Instruction
{followup_instruction}

## Core Workflow
1. Review the previous displays, their SQL and the result excerpts above.
2. Decide for each previous display whether to keep it unchanged, modify it, or drop it; append new displays where the instruction asks for more.
3. Sample Data: the tables used above were already examined. Call `sampleTable` ONLY for tables not previously examined.
4. Return JSON Response: Output ONLY valid JSON matching the specified structure below. No prose outside the JSON.

""" + OUTPUT_FORMAT_SECTION + """
Remember: Output ONLY valid JSON."""

followup_query_prompt = PromptTemplate(
    input_variables=["schema_text", "previous_query", "previous_displays", "followup_instruction"],
    template=FOLLOWUP_QUERY_TEMPLATE,
)
