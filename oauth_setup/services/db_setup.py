# oauth_setup/services/db_setup.py
# Utility script to create or verify the database schema.
# Probes for the table first and only submits the schema SQL when the remote
# reports the table as undefined, so re-running is always safe.

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from oauth_setup import config
from oauth_setup.services.executors import (
    UNDEFINED_TABLE_CODES,
    PostgresExecutor,
    RemoteError,
    RemoteExecutor,
    SupabaseExecutor,
)
from oauth_setup.services.sql_schema import OAUTH_PROVIDERS, render_schema_sql
from oauth_setup.services.storage import get_client
from oauth_setup.services.table_schema import TableSchema

logger = logging.getLogger("oauth_setup.provision")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(handler)
logger.setLevel(logging.INFO)


class ProbeStatus(str, Enum):
    EXISTS = "exists"
    NOT_FOUND = "not_found"
    ERROR = "error"


class ProvisionStatus(str, Enum):
    ALREADY_EXISTS = "already_exists"
    CREATED = "created"
    PROBE_FAILED = "probe_failed"
    CREATION_FAILED = "creation_failed"
    MANUAL_REQUIRED = "manual_required"


@dataclass(frozen=True)
class ProbeResult:
    status: ProbeStatus
    detail: Optional[str] = None


@dataclass(frozen=True)
class ProvisionOutcome:
    status: ProvisionStatus
    table: str
    detail: Optional[str] = None
    statement: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (ProvisionStatus.ALREADY_EXISTS, ProvisionStatus.CREATED)


def probe_table(executor: RemoteExecutor, table_name: str) -> ProbeResult:
    """
    Check whether `table_name` exists by reading at most one row.
    Absence is identified by the undefined-table error code, never by an
    empty result.
    """
    try:
        executor.probe(table_name)
    except RemoteError as e:
        if e.code in UNDEFINED_TABLE_CODES:
            return ProbeResult(ProbeStatus.NOT_FOUND, e.detail)
        return ProbeResult(ProbeStatus.ERROR, e.detail)
    return ProbeResult(ProbeStatus.EXISTS)


def ensure_table(
    executor: RemoteExecutor,
    schema: TableSchema = OAUTH_PROVIDERS,
    *,
    apply: bool = True,
) -> ProvisionOutcome:
    """
    Make sure `schema` exists on the remote, creating it at most once.

      - table present        → ALREADY_EXISTS, nothing else is sent
      - unexpected probe err → PROBE_FAILED, creation is not attempted
      - table absent         → one execute() with the full statement:
                               CREATED, or CREATION_FAILED with the remote detail
      - absent, apply=False  → MANUAL_REQUIRED with the statement to run by hand

    No retries: each branch is a single attempt.
    """
    logger.info("Checking for %s table...", schema.name)
    probe = probe_table(executor, schema.name)

    if probe.status is ProbeStatus.EXISTS:
        logger.info("Table %s already exists", schema.name)
        return ProvisionOutcome(ProvisionStatus.ALREADY_EXISTS, schema.name)

    if probe.status is ProbeStatus.ERROR:
        logger.error("Error checking table %s: %s", schema.name, probe.detail)
        return ProvisionOutcome(ProvisionStatus.PROBE_FAILED, schema.name, detail=probe.detail)

    statement = render_schema_sql(schema)

    if not apply:
        logger.warning("Table %s does not exist; manual creation required", schema.name)
        return ProvisionOutcome(ProvisionStatus.MANUAL_REQUIRED, schema.name, statement=statement)

    logger.info("Table %s does not exist. Creating it now...", schema.name)
    try:
        executor.execute(statement)
    except RemoteError as e:
        logger.error("Creating %s failed (code=%s): %s", schema.name, e.code, e.detail)
        return ProvisionOutcome(
            ProvisionStatus.CREATION_FAILED, schema.name, detail=e.detail, statement=statement
        )

    logger.info("Table %s created", schema.name)
    return ProvisionOutcome(ProvisionStatus.CREATED, schema.name, statement=statement)


def default_executor() -> RemoteExecutor:
    """Build the executor selected by PROVISION_BACKEND."""
    if config.PROVISION_BACKEND == "postgres":
        return PostgresExecutor()
    if config.PROVISION_BACKEND == "supabase":
        return SupabaseExecutor(get_client(), rpc_function=config.SUPABASE_EXEC_SQL_FUNCTION)
    raise RuntimeError(
        f"Unknown PROVISION_BACKEND {config.PROVISION_BACKEND!r} (expected 'supabase' or 'postgres')"
    )


RULER = "-----------------------------------------------"


def report(outcome: ProvisionOutcome) -> int:
    """Print the operator-facing summary; return the process exit code."""
    if outcome.status is ProvisionStatus.ALREADY_EXISTS:
        print("✅ Table already exists!")
    elif outcome.status is ProvisionStatus.CREATED:
        print("✅ Table created successfully!")
    elif outcome.status is ProvisionStatus.MANUAL_REQUIRED:
        print("Table does not exist.")
        print("")
        print("Please run this SQL in your Supabase SQL Editor:")
        print(RULER)
        print(outcome.statement)
        print(RULER)
    elif outcome.status is ProvisionStatus.PROBE_FAILED:
        print(f"Error checking table: {outcome.detail}", file=sys.stderr)
        return 1
    else:
        print(f"Error: {outcome.detail}", file=sys.stderr)
        return 1
    return 0


def run_schema(apply: Optional[bool] = None) -> int:
    """Ensure the oauth_providers table using the configured executor."""
    if apply is None:
        apply = config.PROVISION_APPLY
    outcome = ensure_table(default_executor(), OAUTH_PROVIDERS, apply=apply)
    return report(outcome)

if __name__ == "__main__":
    raise SystemExit(run_schema())
