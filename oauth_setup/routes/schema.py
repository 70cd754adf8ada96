# oauth_setup/routes/schema.py
# Read-only endpoints for the provisioned tables.
# Exposes the rendered schema SQL (for manual runs in the SQL editor)
# and the current existence check against the remote database.

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from typing import Dict, Any

from oauth_setup.services.db_setup import ProbeStatus, default_executor, probe_table
from oauth_setup.services.executors import RemoteExecutor
from oauth_setup.services.sql_schema import SCHEMAS, render_schema_sql
from oauth_setup.services.table_schema import TableSchema

router = APIRouter(prefix="/schema", tags=["schema"])

def get_executor() -> RemoteExecutor:
    return default_executor()

def _lookup(table: str) -> TableSchema:
    schema = SCHEMAS.get(table)
    if schema is None:
        raise HTTPException(status_code=404, detail=f"Unknown table: {table}")
    return schema

@router.get("/{table}/sql", response_class=PlainTextResponse)
def schema_sql(table: str) -> str:
    """Return the full, re-runnable schema statement for `table`."""
    return render_schema_sql(_lookup(table))

@router.get("/{table}/status")
def schema_status(table: str, executor: RemoteExecutor = Depends(get_executor)) -> Dict[str, Any]:
    """
    Probe the remote for `table`.
      - 200 with status "exists" / "not_found"
      - 502 when the probe fails for any other reason (remote detail included)
    """
    schema = _lookup(table)
    result = probe_table(executor, schema.name)
    if result.status is ProbeStatus.ERROR:
        raise HTTPException(status_code=502, detail=result.detail)
    return {"table": schema.name, "status": result.status.value, "detail": result.detail}
