from core.context_builder import GUIDELINES, render_context, render_table


def test_every_column_and_type_is_rendered(blog_schema):
    context = render_context(blog_schema)
    for table_name, table in blog_schema.items():
        assert f"## Table: `{table_name}`" in context
        for col_name, col in table.columns.items():
            assert f"`{col_name}`: {col.type}" in context


def test_column_markers(blog_schema):
    text = render_table("posts", blog_schema["posts"])
    assert "- `id`: INTEGER NOT NULL PRIMARY KEY AUTO_INCREMENT" in text
    assert "- `body`: TEXT NULL" in text
    assert "DEFAULT CURRENT_TIMESTAMP" in text
    assert "### Primary Key\n- id" in text


def test_string_default_is_quoted(blog_schema):
    text = render_table("users", blog_schema["users"])
    assert "- `status`: VARCHAR(20) NULL DEFAULT 'active'" in text


def test_foreign_keys_and_indexes(blog_schema):
    context = render_context(blog_schema)
    assert "- `post_id` → `posts`.`id`" in context
    assert "- UNIQUE INDEX `ux_users_email` (`email`)" in context


def test_guidelines_are_appended(blog_schema):
    context = render_context(blog_schema)
    assert context.endswith(GUIDELINES)
    assert "LIMIT 10" in context
    assert "LEFT JOIN" in context
    assert "alias" in context
    assert "SELECT *" in context


def test_output_is_deterministic(blog_schema):
    assert render_context(blog_schema) == render_context(dict(blog_schema))


def test_bounded_output_lists_omitted_tables(blog_schema):
    context = render_context(blog_schema, max_chars=50)
    assert "## Table: `posts`" in context
    assert "## Table: `users`" not in context
    assert "Tables omitted for length: users, comments" in context
