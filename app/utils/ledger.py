"""
Ledger Store
Single source of truth for cash-flow entries, operational costs and debts.

Every mutation is persisted through the gateway first; the in-memory
collections only change after the gateway succeeds, and they always hold the
gateway's canonical row rather than the draft that was sent.
"""
import datetime as dt
import logging
import threading
from typing import Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel

from app.db.dynamo import CASH_FLOW, DEBTS, OPERATIONAL_COSTS, PersistenceError
from app.models.cash_flow import CashFlowCreate, CashFlowEntry, CashFlowUpdate
from app.models.debt import Debt, DebtCreate, DebtUpdate
from app.models.operational_cost import (
    INSTALLMENT_CATEGORY,
    OperationalCost,
    OperationalCostCreate,
    OperationalCostUpdate,
    installment_description,
)
from app.utils.analyzer import LedgerAnalyzer, LedgerSummary

logger = logging.getLogger(__name__)

_MODELS: Dict[str, Type[BaseModel]] = {
    CASH_FLOW: CashFlowEntry,
    OPERATIONAL_COSTS: OperationalCost,
    DEBTS: Debt,
}

# Columns a caller may change; ids, timestamps and debt links stay as stored
_UPDATE_MODELS: Dict[str, Type[BaseModel]] = {
    CASH_FLOW: CashFlowUpdate,
    OPERATIONAL_COSTS: OperationalCostUpdate,
    DEBTS: DebtUpdate,
}

# Optional columns a partial update may clear by sending null
_NULLABLE = {CASH_FLOW: ("status", "payment_method"), OPERATIONAL_COSTS: (), DEBTS: ()}


class RecordNotFoundError(Exception):
    def __init__(self, table: str, item_id: str):
        self.table = table
        self.item_id = item_id
        super().__init__(f"No record {item_id} in {table}")


def _record_date(record) -> dt.date:
    return record.due_date if isinstance(record, Debt) else record.date


def _changes(table: str, partial: Union[BaseModel, dict]) -> dict:
    if isinstance(partial, BaseModel):
        partial = partial.model_dump(mode="json", exclude_unset=True)
    return {
        k: v.isoformat() if isinstance(v, dt.date) else v
        for k, v in partial.items()
        if k in _UPDATE_MODELS[table].model_fields
        and (v is not None or k in _NULLABLE[table])
    }


class LedgerStore:
    def __init__(self, gateway, analyzer: Optional[LedgerAnalyzer] = None):
        self.gateway = gateway
        self._analyzer = analyzer or LedgerAnalyzer()
        self._lock = threading.RLock()
        self._records: Dict[str, list] = {CASH_FLOW: [], OPERATIONAL_COSTS: [], DEBTS: []}
        self.selected_date: Optional[dt.date] = None

    def load(self) -> None:
        """Replace the in-memory collections with the gateway's contents."""
        loaded = {}
        for table, model in _MODELS.items():
            # select_all is newest first; keep insertion order in memory
            loaded[table] = [model(**row) for row in reversed(self.gateway.select_all(table))]
        with self._lock:
            self._records = loaded
        logger.info(
            f"Ledger loaded: {len(loaded[CASH_FLOW])} cash-flow entries, "
            f"{len(loaded[OPERATIONAL_COSTS])} operational costs, {len(loaded[DEBTS])} debts"
        )

    # ------------------------------------------------------------------
    # Generic persistence helpers
    # ------------------------------------------------------------------

    def _insert(self, table: str, row: dict):
        record = _MODELS[table](**self.gateway.insert(table, row))
        with self._lock:
            self._records[table].append(record)
        return record

    def _find(self, table: str, item_id: str):
        with self._lock:
            return next((r for r in self._records[table] if r.id == item_id), None)

    def _update(self, table: str, item_id: str, changes: dict):
        current = self._find(table, item_id)
        if current is None:
            raise RecordNotFoundError(table, item_id)
        if not changes:
            return current

        row = self.gateway.update(table, item_id, changes)
        if row is None:
            raise RecordNotFoundError(table, item_id)
        record = _MODELS[table](**row)
        with self._lock:
            self._records[table] = [record if r.id == item_id else r for r in self._records[table]]
        return record

    def _delete(self, table: str, item_id: str) -> bool:
        if self._find(table, item_id) is None:
            return False
        self.gateway.delete(table, item_id)
        with self._lock:
            self._records[table] = [r for r in self._records[table] if r.id != item_id]
        return True

    # ------------------------------------------------------------------
    # Cash flow
    # ------------------------------------------------------------------

    def add_cash_flow_entry(self, entry: CashFlowCreate) -> CashFlowEntry:
        return self._insert(CASH_FLOW, entry.model_dump(mode="json"))

    def update_cash_flow_entry(self, entry_id: str, partial: Union[CashFlowUpdate, dict]) -> CashFlowEntry:
        return self._update(CASH_FLOW, entry_id, _changes(CASH_FLOW, partial))

    def delete_cash_flow_entry(self, entry_id: str) -> bool:
        return self._delete(CASH_FLOW, entry_id)

    # ------------------------------------------------------------------
    # Operational costs
    # ------------------------------------------------------------------

    def add_operational_cost(self, cost: OperationalCostCreate) -> OperationalCost:
        return self._insert(OPERATIONAL_COSTS, cost.model_dump(mode="json"))

    def update_operational_cost(self, cost_id: str, partial: Union[OperationalCostUpdate, dict]) -> OperationalCost:
        return self._update(OPERATIONAL_COSTS, cost_id, _changes(OPERATIONAL_COSTS, partial))

    def delete_operational_cost(self, cost_id: str) -> bool:
        return self._delete(OPERATIONAL_COSTS, cost_id)

    # ------------------------------------------------------------------
    # Debts
    # ------------------------------------------------------------------

    def add_debt(self, debt: DebtCreate) -> Tuple[Debt, Optional[OperationalCost]]:
        """
        Persist a debt and, when it has an installment value, the fixed
        operational cost for that installment.

        Both rows are written before either shows up in memory. If the cost
        cannot be written the debt row is deleted again and the error is
        raised.
        """
        row = debt.model_dump(mode="json")
        row["total_with_interest"] = debt.installments * debt.installment_value
        created = Debt(**self.gateway.insert(DEBTS, row))

        installment = None
        if created.installment_value > 0:
            draft = OperationalCostCreate(
                description=installment_description(created.creditor),
                type="fixed",
                amount=created.installment_value,
                date=created.due_date,
                category=INSTALLMENT_CATEGORY,
                debt_id=created.id,
            )
            try:
                installment = OperationalCost(
                    **self.gateway.insert(OPERATIONAL_COSTS, draft.model_dump(mode="json"))
                )
            except PersistenceError:
                logger.error(f"Installment cost for debt {created.id} failed, rolling back debt")
                try:
                    self.gateway.delete(DEBTS, created.id)
                except PersistenceError:
                    logger.error(f"Rollback failed: debt {created.id} stored without installment cost")
                raise

        with self._lock:
            self._records[DEBTS].append(created)
            if installment is not None:
                self._records[OPERATIONAL_COSTS].append(installment)
        return created, installment

    def update_debt(self, debt_id: str, partial: Union[DebtUpdate, dict]) -> Debt:
        changes = _changes(DEBTS, partial)
        if "installments" in changes or "installment_value" in changes:
            current = self._find(DEBTS, debt_id)
            if current is None:
                raise RecordNotFoundError(DEBTS, debt_id)
            installments = changes.get("installments", current.installments)
            installment_value = changes.get("installment_value", current.installment_value)
            changes["total_with_interest"] = installments * installment_value
        return self._update(DEBTS, debt_id, changes)

    def installment_cost_for(self, debt: Debt) -> Optional[OperationalCost]:
        """
        Locate the installment cost generated for a debt. Rows carrying a
        debt_id are matched on it; older rows without one fall back to the
        description/category naming convention.
        """
        with self._lock:
            costs = list(self._records[OPERATIONAL_COSTS])
        linked = next((c for c in costs if c.debt_id == debt.id), None)
        if linked is not None:
            return linked
        description = installment_description(debt.creditor)
        return next(
            (
                c
                for c in costs
                if c.debt_id is None and c.category == INSTALLMENT_CATEGORY and c.description == description
            ),
            None,
        )

    def delete_debt(self, debt_id: str) -> bool:
        debt = self._find(DEBTS, debt_id)
        if debt is None:
            return False
        installment = self.installment_cost_for(debt)
        self._delete(DEBTS, debt_id)

        if installment is None:
            logger.debug(f"No installment cost found for deleted debt {debt_id}")
            return True
        try:
            self._delete(OPERATIONAL_COSTS, installment.id)
        except PersistenceError as e:
            logger.error(f"Debt {debt_id} deleted but its installment cost {installment.id} remains: {e}")
        return True

    # ------------------------------------------------------------------
    # Date filter and listings
    # ------------------------------------------------------------------

    def set_date_filter(self, selected_date: Optional[dt.date]) -> None:
        self.selected_date = selected_date

    def _visible(self, table: str, recent_first: bool = False) -> list:
        with self._lock:
            records = list(self._records[table])
        if self.selected_date is not None:
            records = [r for r in records if _record_date(r) == self.selected_date]
        if recent_first:
            # later date first; among equal dates the later insertion wins
            ordered = sorted(enumerate(records), key=lambda pair: (_record_date(pair[1]), pair[0]), reverse=True)
            records = [record for _, record in ordered]
        return records

    def cash_flow_entries(self, recent_first: bool = False) -> List[CashFlowEntry]:
        return self._visible(CASH_FLOW, recent_first)

    def operational_costs(self, recent_first: bool = False) -> List[OperationalCost]:
        return self._visible(OPERATIONAL_COSTS, recent_first)

    def debts(self, recent_first: bool = False) -> List[Debt]:
        return self._visible(DEBTS, recent_first)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def total_revenue(self) -> float:
        return self._analyzer.total_revenue(self.cash_flow_entries())

    def total_expenses(self) -> float:
        return self._analyzer.total_expenses(self.cash_flow_entries())

    def total_debts(self) -> float:
        return self._analyzer.total_debts(self.debts())

    def total_operational_costs(self) -> float:
        return self._analyzer.total_operational_costs(self.operational_costs())

    def net_cash_flow(self) -> float:
        return self._analyzer.net_cash_flow(self.cash_flow_entries())

    def summary(self) -> LedgerSummary:
        return self._analyzer.summarize(self.cash_flow_entries(), self.operational_costs(), self.debts())
