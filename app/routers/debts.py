from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.dynamo import PersistenceError
from app.dependencies import get_store
from app.models.debt import Debt, DebtCreate, DebtCreated, DebtUpdate
from app.utils.ledger import LedgerStore, RecordNotFoundError

router = APIRouter()


@router.get("/", response_model=List[Debt])
def list_debts(recent: bool = False, store: LedgerStore = Depends(get_store)):
    """Debts whose due date matches the current date filter."""
    return store.debts(recent_first=recent)


@router.post("/", response_model=DebtCreated, status_code=status.HTTP_201_CREATED)
def create_debt(debt: DebtCreate, store: LedgerStore = Depends(get_store)):
    """
    Create a debt. A debt with an installment value also gets a fixed
    operational cost for that installment; both are returned.
    """
    try:
        created, installment = store.add_debt(debt)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to save debt: {e}")
    return DebtCreated(debt=created, installment_cost=installment)


@router.patch("/{debt_id}", response_model=Debt)
def update_debt(debt_id: str, debt_update: DebtUpdate, store: LedgerStore = Depends(get_store)):
    try:
        return store.update_debt(debt_id, debt_update)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Debt not found")
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to update debt: {e}")


@router.delete("/{debt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_debt(debt_id: str, store: LedgerStore = Depends(get_store)):
    try:
        store.delete_debt(debt_id)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to delete debt: {e}")
    return None
