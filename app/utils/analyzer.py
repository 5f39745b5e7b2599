from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Sequence

from app.models.cash_flow import CashFlowEntry
from app.models.debt import Debt
from app.models.operational_cost import OperationalCost


@dataclass
class LedgerSummary:
    """Headline figures for one view of the ledger."""

    total_revenue: float
    total_expenses: float
    net_cash_flow: float
    total_debts: float
    total_operational_costs: float
    fixed_costs_total: float
    variable_costs_total: float
    inflow_count: int
    outflow_count: int
    overdue_debts: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _sum(amounts: Iterable[float]) -> float:
    return sum(float(amount or 0) for amount in amounts)


class LedgerAnalyzer:
    """
    Pure aggregate functions over ledger records. Callers decide which
    records to pass in (e.g. after applying a date filter); nothing here
    holds state.
    """

    def total_revenue(self, entries: Sequence[CashFlowEntry]) -> float:
        return _sum(entry.amount for entry in entries if entry.type == "inflow")

    def total_expenses(self, entries: Sequence[CashFlowEntry]) -> float:
        return _sum(entry.amount for entry in entries if entry.type == "outflow")

    def net_cash_flow(self, entries: Sequence[CashFlowEntry]) -> float:
        return self.total_revenue(entries) - self.total_expenses(entries)

    def total_debts(self, debts: Sequence[Debt]) -> float:
        return _sum(debt.amount for debt in debts)

    def total_operational_costs(self, costs: Sequence[OperationalCost]) -> float:
        return _sum(cost.amount for cost in costs)

    def cost_totals_by_type(self, costs: Sequence[OperationalCost]) -> Dict[str, float]:
        return {
            "fixed": _sum(cost.amount for cost in costs if cost.type == "fixed"),
            "variable": _sum(cost.amount for cost in costs if cost.type == "variable"),
        }

    def summarize(
        self,
        entries: Sequence[CashFlowEntry],
        costs: Sequence[OperationalCost],
        debts: Sequence[Debt],
    ) -> LedgerSummary:
        by_type = self.cost_totals_by_type(costs)
        return LedgerSummary(
            total_revenue=self.total_revenue(entries),
            total_expenses=self.total_expenses(entries),
            net_cash_flow=self.net_cash_flow(entries),
            total_debts=self.total_debts(debts),
            total_operational_costs=self.total_operational_costs(costs),
            fixed_costs_total=by_type["fixed"],
            variable_costs_total=by_type["variable"],
            inflow_count=sum(1 for entry in entries if entry.type == "inflow"),
            outflow_count=sum(1 for entry in entries if entry.type == "outflow"),
            overdue_debts=sum(1 for debt in debts if debt.status == "overdue"),
        )
