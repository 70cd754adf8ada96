# oauth_setup/config.py
# Application configuration settings.

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

APP_NAME = "OAuth Table Setup"
APP_VERSION = os.getenv("APP_VERSION", "0.1.0")

# Supabase REST client (service key bypasses RLS, needed for DDL via RPC)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY")
SUPABASE_EXEC_SQL_FUNCTION = os.getenv("SUPABASE_EXEC_SQL_FUNCTION", "exec_sql")

# Direct Postgres connection string
SUPABASE_DB_URL = os.getenv("SUPABASE_DB_URL")

# "supabase" -> PostgREST + exec_sql RPC, "postgres" -> psycopg2
PROVISION_BACKEND = os.getenv("PROVISION_BACKEND", "supabase").strip().lower()

# false -> print the SQL for the SQL editor instead of running it
PROVISION_APPLY = os.getenv("PROVISION_APPLY", "true").strip().lower() in {"1", "true", "yes", "on"}


def require(name: str, value):
    """Return a configured value or fail with the variable name."""
    if not value:
        raise RuntimeError(f"{name} is not set. Check your .env file in the project root.")
    return value
