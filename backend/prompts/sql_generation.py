"""
LangChain prompt templates for SQL generation and advisory validation.
"""
from langchain_core.prompts import PromptTemplate

# ── SQL generation ────────────────────────────────────────────────────────────

SQL_SYSTEM_TEMPLATE = """\
You are an expert SQL developer. Generate accurate and secure SQL for the user's request.
Target database dialect: {dialect}

{context}

# Instructions
1. Use ONLY tables and columns that exist in the schema above
2. Return every statement inside a ```sql ... ``` code block
3. Separate multiple statements with semicolons
4. Use named parameters (e.g. :status) for every value, never literals
5. UPDATE and DELETE statements MUST have a WHERE clause on a key column
6. Never generate DROP, TRUNCATE, ALTER, GRANT or other schema/permission changes

# Example
```sql
SELECT u.id, u.name, r.name AS role_name
FROM users u
INNER JOIN roles r ON r.id = u.role_id
WHERE u.status = :status
ORDER BY u.created_at DESC
LIMIT 10;
```
"""

sql_system_prompt = PromptTemplate(
    input_variables=["dialect", "context"],
    template=SQL_SYSTEM_TEMPLATE,
)

# ── Advisory validation ───────────────────────────────────────────────────────

VALIDATION_TEMPLATE = """\
Analyze this SQL query and answer with a single JSON object and nothing else.

QUERY:
{query}

Respond with exactly these fields:
{{
  "valid": true | false,
  "type": "SELECT" | "INSERT" | "UPDATE" | "DELETE" | "OTHER",
  "is_destructive": true | false,
  "security_risk": "none" | "low" | "medium" | "high",
  "message": "<detailed validation message>",
  "suggestions": ["<suggestion 1>", "<suggestion 2>"]
}}
"""

validation_prompt = PromptTemplate(
    input_variables=["query"],
    template=VALIDATION_TEMPLATE,
)
