from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.dynamo import PersistenceError
from app.dependencies import get_store
from app.models.cash_flow import CashFlowCreate, CashFlowEntry, CashFlowUpdate
from app.utils.ledger import LedgerStore, RecordNotFoundError

router = APIRouter()


@router.get("/", response_model=List[CashFlowEntry])
def list_cash_flow_entries(recent: bool = False, store: LedgerStore = Depends(get_store)):
    """Entries visible under the current date filter."""
    return store.cash_flow_entries(recent_first=recent)


@router.post("/", response_model=CashFlowEntry, status_code=status.HTTP_201_CREATED)
def create_cash_flow_entry(entry: CashFlowCreate, store: LedgerStore = Depends(get_store)):
    try:
        return store.add_cash_flow_entry(entry)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to save entry: {e}")


@router.patch("/{entry_id}", response_model=CashFlowEntry)
def update_cash_flow_entry(
    entry_id: str,
    entry_update: CashFlowUpdate,
    store: LedgerStore = Depends(get_store),
):
    try:
        return store.update_cash_flow_entry(entry_id, entry_update)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Cash-flow entry not found")
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to update entry: {e}")


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cash_flow_entry(entry_id: str, store: LedgerStore = Depends(get_store)):
    try:
        store.delete_cash_flow_entry(entry_id)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to delete entry: {e}")
    return None
