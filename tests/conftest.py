"""
Shared fixtures: an in-memory stand-in for the DynamoDB gateway so the
ledger store can be exercised without AWS.
"""
import copy
import itertools

import pytest

from app.db.dynamo import CASH_FLOW, DEBTS, OPERATIONAL_COSTS, PersistenceError
from app.utils.ledger import LedgerStore


class InMemoryGateway:
    def __init__(self):
        self.rows = {CASH_FLOW: {}, OPERATIONAL_COSTS: {}, DEBTS: {}}
        self.failures = set()  # (operation, table) pairs that should fail
        self.calls = []
        self._ids = itertools.count(1)

    def _check(self, operation, table):
        self.calls.append((operation, table))
        if (operation, table) in self.failures:
            raise PersistenceError(operation, table, "simulated failure")

    def insert(self, table, item):
        self._check("insert", table)
        n = next(self._ids)
        row = {**item, "id": f"{table}-{n}", "created_at": f"2025-01-01T00:00:00.{n:06d}"}
        self.rows[table][row["id"]] = row
        return copy.deepcopy(row)

    def update(self, table, item_id, updates):
        self._check("update", table)
        if item_id not in self.rows[table]:
            return None
        row = self.rows[table][item_id]
        for key, value in updates.items():
            if value is None:
                row.pop(key, None)
            else:
                row[key] = value
        return copy.deepcopy(row)

    def delete(self, table, item_id):
        self._check("delete", table)
        return self.rows[table].pop(item_id, None) is not None

    def select_all(self, table):
        self._check("select", table)
        rows = [copy.deepcopy(row) for row in self.rows[table].values()]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def store(gateway):
    return LedgerStore(gateway)
