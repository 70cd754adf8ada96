# oauth_setup/services/executors.py
# Remote executors: the two operations the provisioner needs from the database
# (a one-row probe and raw statement execution), over Supabase or psycopg2.

from typing import Any, Callable, List, Optional, Protocol

import httpx
import psycopg2
from psycopg2 import errorcodes, sql
from postgrest.exceptions import APIError

from oauth_setup.services.db import get_conn, logger as db_logger, run_query

# "relation does not exist"
UNDEFINED_TABLE = errorcodes.UNDEFINED_TABLE
# PostgREST answers with this instead when the table is missing from its schema cache
POSTGREST_TABLE_NOT_FOUND = "PGRST205"

UNDEFINED_TABLE_CODES = frozenset({UNDEFINED_TABLE, POSTGREST_TABLE_NOT_FOUND})


class RemoteError(Exception):
    """Failure reported by the remote database, with its code and message kept as-is."""

    def __init__(self, code: Optional[str], detail: str):
        super().__init__(detail)
        self.code = code
        self.detail = detail

    def __repr__(self) -> str:
        return f"RemoteError(code={self.code!r}, detail={self.detail!r})"


class RemoteExecutor(Protocol):
    def probe(self, table_name: str) -> List[Any]:
        ...

    def execute(self, statement: str) -> None:
        ...


class SupabaseExecutor:
    """Probe through PostgREST, execute through an `exec_sql(sql text)` RPC."""

    def __init__(self, client, rpc_function: str = "exec_sql"):
        self.client = client
        self.rpc_function = rpc_function

    def probe(self, table_name: str) -> List[Any]:
        try:
            resp = self.client.table(table_name).select("*").limit(1).execute()
        except APIError as e:
            raise RemoteError(e.code, e.message or str(e)) from e
        except httpx.HTTPError as e:
            raise RemoteError(None, str(e)) from e
        return resp.data or []

    def execute(self, statement: str) -> None:
        try:
            self.client.rpc(self.rpc_function, {"sql": statement}).execute()
        except APIError as e:
            raise RemoteError(e.code, e.message or str(e)) from e
        except httpx.HTTPError as e:
            raise RemoteError(None, str(e)) from e


def _table_identifier(table_name: str) -> sql.Composable:
    # "auth.users" -> "auth"."users"
    return sql.SQL(".").join(sql.Identifier(part) for part in table_name.split("."))


def _rollback_quiet(conn) -> None:
    # a dead connection fails rollback too; keep the original error
    try:
        conn.rollback()
    except psycopg2.Error as e:
        db_logger.warning("Rollback failed: %s", e)


class PostgresExecutor:
    """Direct connection; the statement runs in one transaction."""

    def __init__(self, connect: Callable = get_conn):
        self.connect = connect

    def probe(self, table_name: str) -> List[Any]:
        query = sql.SQL("SELECT * FROM {} LIMIT 1").format(_table_identifier(table_name))
        try:
            return run_query(query, connect=self.connect)
        except psycopg2.Error as e:
            raise RemoteError(e.pgcode, e.pgerror or str(e)) from e

    def execute(self, statement: str) -> None:
        try:
            with self.connect() as conn:
                try:
                    with conn.cursor() as cur:
                        cur.execute(statement)
                    conn.commit()
                except Exception:
                    _rollback_quiet(conn)
                    raise
        except psycopg2.Error as e:
            raise RemoteError(e.pgcode, e.pgerror or str(e)) from e
