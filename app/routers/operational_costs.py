from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.dynamo import PersistenceError
from app.dependencies import get_store
from app.models.operational_cost import OperationalCost, OperationalCostCreate, OperationalCostUpdate
from app.utils.ledger import LedgerStore, RecordNotFoundError

router = APIRouter()


@router.get("/", response_model=List[OperationalCost])
def list_operational_costs(recent: bool = False, store: LedgerStore = Depends(get_store)):
    return store.operational_costs(recent_first=recent)


@router.post("/", response_model=OperationalCost, status_code=status.HTTP_201_CREATED)
def create_operational_cost(cost: OperationalCostCreate, store: LedgerStore = Depends(get_store)):
    try:
        return store.add_operational_cost(cost)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to save cost: {e}")


@router.patch("/{cost_id}", response_model=OperationalCost)
def update_operational_cost(
    cost_id: str,
    cost_update: OperationalCostUpdate,
    store: LedgerStore = Depends(get_store),
):
    try:
        return store.update_operational_cost(cost_id, cost_update)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Operational cost not found")
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to update cost: {e}")


@router.delete("/{cost_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_operational_cost(cost_id: str, store: LedgerStore = Depends(get_store)):
    try:
        store.delete_operational_cost(cost_id)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to delete cost: {e}")
    return None
