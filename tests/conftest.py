# tests/conftest.py

from typing import Any, Dict, List, Optional, Set

import pytest

from oauth_setup.services.executors import UNDEFINED_TABLE, RemoteError


class FakeExecutor:
    """
    In-memory stand-in for the remote database.
    A successful execute() "creates" every table named in `creates`.
    """

    def __init__(
        self,
        tables: Optional[Set[str]] = None,
        probe_error: Optional[RemoteError] = None,
        execute_error: Optional[RemoteError] = None,
        creates: Optional[Set[str]] = None,
    ):
        self.tables: Set[str] = set(tables or ())
        self.rows: Dict[str, List[Any]] = {}
        self.probe_error = probe_error
        self.execute_error = execute_error
        self.creates = creates
        self.probe_calls: List[str] = []
        self.execute_calls: List[str] = []

    def probe(self, table_name: str) -> List[Any]:
        self.probe_calls.append(table_name)
        if self.probe_error is not None:
            raise self.probe_error
        if table_name not in self.tables:
            raise RemoteError(UNDEFINED_TABLE, f'relation "{table_name}" does not exist')
        return self.rows.get(table_name, [])[:1]

    def execute(self, statement: str) -> None:
        self.execute_calls.append(statement)
        if self.execute_error is not None:
            raise self.execute_error
        for name in self.creates or ():
            self.tables.add(name)


@pytest.fixture()
def fresh_remote() -> FakeExecutor:
    return FakeExecutor(creates={"oauth_providers"})


@pytest.fixture()
def existing_remote() -> FakeExecutor:
    return FakeExecutor(tables={"oauth_providers"})


@pytest.fixture()
def make_executor():
    return FakeExecutor
