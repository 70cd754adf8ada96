# oauth_setup/services/db.py
# Database service module for managing PostgreSQL connections and queries.

import psycopg2
from contextlib import contextmanager
import logging

from oauth_setup import config

# Configure a basic logger for database interactions
logger = logging.getLogger("oauth_setup.db")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

@contextmanager
def get_conn():
    """Provide a managed PostgreSQL connection."""
    logger.info("Opening PostgreSQL connection")
    conn = psycopg2.connect(config.require("SUPABASE_DB_URL", config.SUPABASE_DB_URL))
    try:
        yield conn
    finally:
        conn.close()

def run_query(query, params=None, fetch: str = "all", connect=None):
    """
    Execute a query (plain text or psycopg2.sql composed) with optional parameters.
    Logs the query and returns results based on fetch mode.
      - fetch="one" → return single row
      - fetch="all" → return all rows
    """
    text = query if isinstance(query, str) else repr(query)
    with (connect or get_conn)() as conn, conn.cursor() as cur:
        logger.info("SQL: %s", text.replace("\n", " ").strip())
        logger.info("Params: %s", params)
        cur.execute(query, params or [])
        if fetch == "one":
            return cur.fetchone()
        return cur.fetchall()
