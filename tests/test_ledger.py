import datetime as dt

import pytest

from app.db.dynamo import CASH_FLOW, DEBTS, OPERATIONAL_COSTS, PersistenceError
from app.models.cash_flow import CashFlowCreate, CashFlowUpdate
from app.models.debt import DebtCreate
from app.models.operational_cost import OperationalCostCreate
from app.utils.ledger import LedgerStore, RecordNotFoundError

MARCH_1 = dt.date(2025, 3, 1)
MARCH_2 = dt.date(2025, 3, 2)


def bankx_debt(**overrides):
    fields = dict(
        creditor="BankX",
        description="Loan renegotiation",
        amount=10000,
        installments=10,
        installment_value=1000,
        due_date=MARCH_1,
    )
    fields.update(overrides)
    return DebtCreate(**fields)


def cash(type_, amount, day=MARCH_1, **extra):
    return CashFlowCreate(description=f"{type_} {amount}", type=type_, amount=amount, date=day, **extra)


def test_add_cash_flow_entry_uses_gateway_row(store, gateway):
    entry = store.add_cash_flow_entry(cash("inflow", 500, category="salary", status="confirmed"))
    assert entry.id == "cash_flow_entries-1"
    assert entry.created_at is not None
    assert store.cash_flow_entries() == [entry]
    assert gateway.rows[CASH_FLOW][entry.id]["date"] == "2025-03-01"


def test_amount_and_description_are_not_validated(store):
    entry = store.add_cash_flow_entry(CashFlowCreate(type="outflow", amount=0, date=MARCH_1))
    assert entry.amount == 0
    assert entry.description == ""


def test_revenue_expenses_and_net(store):
    store.add_cash_flow_entry(cash("inflow", 500))
    store.add_cash_flow_entry(cash("outflow", 200))
    assert store.total_revenue() == 500
    assert store.total_expenses() == 200
    assert store.net_cash_flow() == 300


def test_sub_cent_revenue_is_a_plain_sum(store):
    for _ in range(3):
        store.add_cash_flow_entry(cash("inflow", 0.004))
    assert store.total_revenue() == pytest.approx(0.012)
    assert store.net_cash_flow() == pytest.approx(0.012)


def test_empty_store_aggregates_are_zero(store):
    assert store.net_cash_flow() == 0
    assert store.total_revenue() - store.total_expenses() == store.net_cash_flow()
    assert store.total_debts() == 0
    assert store.total_operational_costs() == 0


def test_add_debt_creates_installment_cost(store):
    debt, installment = store.add_debt(bankx_debt())
    assert debt.total_with_interest == 10000
    assert installment.amount == 1000
    assert installment.type == "fixed"
    assert installment.category == "financial"
    assert installment.date == MARCH_1
    assert installment.debt_id == debt.id
    assert "BankX" in installment.description
    assert store.operational_costs() == [installment]


def test_debt_without_installment_value_has_no_cost(store):
    debt, installment = store.add_debt(bankx_debt(installment_value=0))
    assert installment is None
    assert store.operational_costs() == []
    assert store.debts() == [debt]


def test_one_financial_cost_per_debt(store):
    for creditor in ["BankX", "BankY", "BankX Leasing", "BankX"]:
        store.add_debt(bankx_debt(creditor=creditor))
    financial = [c for c in store.operational_costs() if c.category == "financial"]
    assert len(financial) == 4


def test_delete_debt_removes_its_installment_cost(store, gateway):
    store.add_operational_cost(
        OperationalCostCreate(description="Rent", type="fixed", amount=800, date=MARCH_1, category="rent")
    )
    debt, installment = store.add_debt(bankx_debt())

    assert store.delete_debt(debt.id) is True
    assert store.debts() == []
    assert [c.description for c in store.operational_costs()] == ["Rent"]
    assert installment.id not in gateway.rows[OPERATIONAL_COSTS]


def test_delete_debt_only_removes_its_own_cost_with_overlapping_creditors(store):
    debt_x, _ = store.add_debt(bankx_debt(creditor="BankX"))
    _, leasing_cost = store.add_debt(bankx_debt(creditor="BankX Leasing"))
    store.delete_debt(debt_x.id)
    assert store.operational_costs() == [leasing_cost]


def test_delete_debt_survives_renamed_cost(store):
    debt, installment = store.add_debt(bankx_debt())
    store.update_operational_cost(installment.id, {"description": "Monthly bank payment"})
    store.delete_debt(debt.id)
    assert store.operational_costs() == []


def test_delete_debt_falls_back_to_naming_convention(store, gateway):
    # Rows written before costs carried debt_id
    legacy_cost = store.add_operational_cost(
        OperationalCostCreate(
            description="Installment - BankX", type="fixed", amount=1000, date=MARCH_1, category="financial"
        )
    )
    debt, _ = store.add_debt(bankx_debt(installment_value=0))
    store.delete_debt(debt.id)
    assert legacy_cost.id not in gateway.rows[OPERATIONAL_COSTS]
    assert store.operational_costs() == []


def test_delete_debt_without_linked_cost_still_succeeds(store):
    debt, installment = store.add_debt(bankx_debt())
    store.delete_operational_cost(installment.id)
    assert store.delete_debt(debt.id) is True
    assert store.debts() == []


def test_delete_nonexistent_ids_are_noops(store, gateway):
    store.add_cash_flow_entry(cash("inflow", 10))
    assert store.delete_cash_flow_entry("missing") is False
    assert store.delete_operational_cost("missing") is False
    assert store.delete_debt("missing") is False
    assert ("delete", CASH_FLOW) not in gateway.calls
    assert len(store.cash_flow_entries()) == 1


def test_update_merges_only_given_fields(store):
    entry = store.add_cash_flow_entry(cash("outflow", 120, category="utilities", payment_method="pix"))
    updated = store.update_cash_flow_entry(entry.id, CashFlowUpdate(amount=130))
    assert updated.amount == 130
    assert updated.category == "utilities"
    assert updated.payment_method == "pix"
    assert store.cash_flow_entries() == [updated]


def test_update_can_clear_optional_status(store):
    entry = store.add_cash_flow_entry(cash("outflow", 120, status="paid"))
    updated = store.update_cash_flow_entry(entry.id, {"status": None})
    assert updated.status is None


def test_update_ignores_columns_outside_the_update_model(store, gateway):
    entry = store.add_cash_flow_entry(cash("outflow", 120))
    assert store.update_cash_flow_entry(entry.id, {"id": "other", "created_at": "2030-01-01"}) == entry
    assert not any(op == "update" for op, _ in gateway.calls)

    debt, installment = store.add_debt(bankx_debt())
    updated = store.update_operational_cost(installment.id, {"id": "other", "debt_id": None, "amount": 950})
    assert updated.id == installment.id
    assert updated.debt_id == debt.id
    assert updated.amount == 950
    assert gateway.rows[OPERATIONAL_COSTS][installment.id]["debt_id"] == debt.id

    store.delete_debt(debt.id)
    assert store.operational_costs() == []


def test_update_with_empty_partial_leaves_record_unchanged(store, gateway):
    entry = store.add_cash_flow_entry(cash("outflow", 120))
    debt, _ = store.add_debt(bankx_debt())
    before = entry.model_dump_json()

    assert store.update_cash_flow_entry(entry.id, {}).model_dump_json() == before
    assert store.update_cash_flow_entry(entry.id, CashFlowUpdate()).model_dump_json() == before
    assert store.update_debt(debt.id, {}) == debt
    assert not any(op == "update" for op, _ in gateway.calls)


def test_update_unknown_id_raises_not_found(store):
    with pytest.raises(RecordNotFoundError):
        store.update_cash_flow_entry("missing", {"amount": 1})
    with pytest.raises(RecordNotFoundError):
        store.update_operational_cost("missing", {})
    with pytest.raises(RecordNotFoundError):
        store.update_debt("missing", {"installments": 3})


def test_update_debt_keeps_total_with_interest(store):
    debt, _ = store.add_debt(bankx_debt())
    updated = store.update_debt(debt.id, {"installments": 12})
    assert updated.total_with_interest == 12 * 1000
    updated = store.update_debt(debt.id, {"installment_value": 900.5})
    assert updated.total_with_interest == 12 * 900.5
    updated = store.update_debt(debt.id, {"status": "negotiating"})
    assert updated.total_with_interest == 12 * 900.5


def test_failed_insert_leaves_state_unchanged(store, gateway):
    gateway.failures.add(("insert", CASH_FLOW))
    with pytest.raises(PersistenceError):
        store.add_cash_flow_entry(cash("inflow", 500))
    assert store.cash_flow_entries() == []


def test_failed_update_and_delete_leave_state_unchanged(store, gateway):
    entry = store.add_cash_flow_entry(cash("inflow", 500))
    gateway.failures.update({("update", CASH_FLOW), ("delete", CASH_FLOW)})
    with pytest.raises(PersistenceError):
        store.update_cash_flow_entry(entry.id, {"amount": 1})
    with pytest.raises(PersistenceError):
        store.delete_cash_flow_entry(entry.id)
    assert store.cash_flow_entries() == [entry]


def test_failed_installment_cost_rolls_back_debt(store, gateway):
    gateway.failures.add(("insert", OPERATIONAL_COSTS))
    with pytest.raises(PersistenceError):
        store.add_debt(bankx_debt())
    assert store.debts() == []
    assert store.operational_costs() == []
    assert gateway.rows[DEBTS] == {}


def test_failed_cost_delete_still_deletes_debt(store, gateway):
    debt, installment = store.add_debt(bankx_debt())
    gateway.failures.add(("delete", OPERATIONAL_COSTS))
    assert store.delete_debt(debt.id) is True
    assert store.debts() == []
    assert store.operational_costs() == [installment]


def test_date_filter_applies_to_every_collection(store):
    store.add_cash_flow_entry(cash("inflow", 500, MARCH_1))
    store.add_cash_flow_entry(cash("outflow", 200, MARCH_1))
    store.add_cash_flow_entry(cash("inflow", 1000, MARCH_2))
    store.add_debt(bankx_debt(due_date=MARCH_2))
    store.add_operational_cost(
        OperationalCostCreate(description="Rent", type="fixed", amount=800, date=MARCH_1)
    )

    store.set_date_filter(MARCH_1)
    assert all(e.date == MARCH_1 for e in store.cash_flow_entries())
    assert store.total_revenue() == 500
    assert store.net_cash_flow() == 300
    assert store.debts() == []
    assert store.total_debts() == 0
    assert store.total_operational_costs() == 800

    store.set_date_filter(MARCH_2)
    assert store.total_revenue() == 1000
    assert store.total_debts() == 10000
    assert store.total_operational_costs() == 1000

    store.set_date_filter(None)
    assert len(store.cash_flow_entries()) == 3
    assert store.total_revenue() == 1500
    assert store.total_operational_costs() == 1800


def test_recent_first_listing_breaks_ties_by_insertion(store):
    first = store.add_cash_flow_entry(cash("inflow", 1, MARCH_1))
    second = store.add_cash_flow_entry(cash("inflow", 2, MARCH_2))
    third = store.add_cash_flow_entry(cash("inflow", 3, MARCH_1))
    assert store.cash_flow_entries() == [first, second, third]
    assert store.cash_flow_entries(recent_first=True) == [second, third, first]


def test_load_restores_insertion_order(gateway):
    writer = LedgerStore(gateway)
    first = writer.add_cash_flow_entry(cash("inflow", 1))
    second = writer.add_cash_flow_entry(cash("outflow", 2))
    debt, installment = writer.add_debt(bankx_debt())

    reader = LedgerStore(gateway)
    reader.load()
    assert reader.cash_flow_entries() == [first, second]
    assert reader.debts() == [debt]
    assert reader.operational_costs() == [installment]


def test_failed_load_keeps_previous_state(store, gateway):
    entry = store.add_cash_flow_entry(cash("inflow", 1))
    gateway.failures.add(("select", DEBTS))
    with pytest.raises(PersistenceError):
        store.load()
    assert store.cash_flow_entries() == [entry]
