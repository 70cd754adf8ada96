# oauth_setup/services/sql_schema.py
# SQL schema definition for linked OAuth identities.
# The table, its RLS policies, indexes and updated_at trigger are described
# once as a TableSchema and rendered to a single re-runnable statement.

from typing import Dict, List

from oauth_setup.services.table_schema import (
    Column,
    Index,
    Policy,
    TableSchema,
    UpdateTrigger,
)

# =========================================================
# Rendering
# =========================================================

def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _render_table(schema: TableSchema) -> str:
    width = max(len(c.name) for c in schema.columns)
    lines = []
    for c in schema.columns:
        line = f"  {c.name.ljust(width)}  {c.type}"
        if c.constraints:
            line += f" {c.constraints}"
        lines.append(line)
    for group in schema.unique:
        lines.append(f"  UNIQUE({', '.join(group)})")
    body = ",\n".join(lines)
    return f"CREATE TABLE IF NOT EXISTS {schema.name} (\n{body}\n);"


def _render_policy(table: str, p: Policy) -> str:
    # CREATE POLICY has no IF NOT EXISTS; drop first so the block re-runs
    parts = [
        f"DROP POLICY IF EXISTS {_quote(p.name)} ON {table};",
        f"CREATE POLICY {_quote(p.name)}",
        f"  ON {table} FOR {p.operation.upper()} TO {p.role}",
    ]
    if p.using:
        parts.append(f"  USING ({p.using})")
    if p.check:
        parts.append(f"  WITH CHECK ({p.check})")
    return "\n".join(parts) + ";"


def _render_trigger(schema: TableSchema) -> str:
    t = schema.trigger
    return "\n".join([
        f"CREATE OR REPLACE FUNCTION {t.function_name}()",
        "RETURNS trigger",
        "LANGUAGE plpgsql",
        "AS $$",
        "BEGIN",
        f"  NEW.{t.column} = now();",
        "  RETURN NEW;",
        "END;",
        "$$;",
        "",
        f"DROP TRIGGER IF EXISTS {t.name} ON {schema.name};",
        f"CREATE TRIGGER {t.name}",
        f"  BEFORE UPDATE ON {schema.name}",
        "  FOR EACH ROW",
        f"  EXECUTE FUNCTION {t.function_name}();",
    ])


def render_schema_sql(schema: TableSchema) -> str:
    """
    Build the full schema-definition statement for one table.

    Every statement is guarded (IF NOT EXISTS / OR REPLACE / DROP ... IF EXISTS),
    so two callers racing past the existence probe converge on the same state.
    """
    blocks: List[str] = []

    if schema.extensions:
        blocks.append("\n".join(f"CREATE EXTENSION IF NOT EXISTS {e};" for e in schema.extensions))

    blocks.append(_render_table(schema))

    if schema.policies:
        blocks.append(f"ALTER TABLE {schema.name} ENABLE ROW LEVEL SECURITY;")
        blocks.extend(_render_policy(schema.name, p) for p in schema.policies)

    if schema.indexes:
        blocks.append("\n".join(
            f"CREATE INDEX IF NOT EXISTS {ix.name} ON {schema.name}({ix.column});"
            for ix in schema.indexes
        ))

    if schema.trigger is not None:
        blocks.append(_render_trigger(schema))

    return "\n\n".join(blocks) + "\n"


# =========================================================
# oauth_providers: one row per (user, linked provider)
# =========================================================

OAUTH_PROVIDER_NAMES = ("google", "facebook", "github", "apple")

_OWNER = "auth.uid() = user_id"

OAUTH_PROVIDERS = TableSchema(
    name="oauth_providers",
    extensions=("pgcrypto",),
    columns=(
        Column("id", "uuid", "PRIMARY KEY DEFAULT gen_random_uuid()"),
        Column("user_id", "uuid", "REFERENCES auth.users(id) ON DELETE CASCADE NOT NULL"),
        Column(
            "provider", "text",
            "NOT NULL CHECK (provider IN ("
            + ", ".join(f"'{p}'" for p in OAUTH_PROVIDER_NAMES)
            + "))",
        ),
        Column("provider_user_id", "text", "NOT NULL"),
        Column("email", "text"),
        Column("display_name", "text"),
        Column("avatar_url", "text"),
        Column("access_token", "text"),
        Column("refresh_token", "text"),
        Column("token_expires_at", "timestamptz"),
        Column("created_at", "timestamptz", "DEFAULT now()"),
        Column("updated_at", "timestamptz", "DEFAULT now()"),
    ),
    unique=(("user_id", "provider"),),
    policies=(
        Policy("Users can view own OAuth providers", "select", "authenticated", using=_OWNER),
        Policy("Users can insert own OAuth providers", "insert", "authenticated", check=_OWNER),
        Policy("Users can update own OAuth providers", "update", "authenticated", using=_OWNER, check=_OWNER),
        Policy("Users can delete own OAuth providers", "delete", "authenticated", using=_OWNER),
    ),
    indexes=(
        Index("idx_oauth_providers_user_id", "user_id"),
        Index("idx_oauth_providers_provider", "provider"),
        Index("idx_oauth_providers_provider_user_id", "provider_user_id"),
    ),
    trigger=UpdateTrigger("update_oauth_providers_updated_at"),
)

SCHEMA_SQL = render_schema_sql(OAUTH_PROVIDERS)

# Tables this service knows how to provision, by name
SCHEMAS: Dict[str, TableSchema] = {
    OAUTH_PROVIDERS.name: OAUTH_PROVIDERS,
}
