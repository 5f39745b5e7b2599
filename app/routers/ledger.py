"""
Ledger Router
Summary figures and the global date filter
"""
import datetime as dt
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.dependencies import get_store
from app.utils.ledger import LedgerStore

router = APIRouter()


class DateFilter(BaseModel):
    date: Optional[dt.date] = None  # None clears the filter


@router.get("/summary")
def get_summary(store: LedgerStore = Depends(get_store)) -> Dict:
    """
    Revenue, expenses, net cash flow, debt load and cost totals for the
    records visible under the current date filter.
    """
    return {
        "selected_date": store.selected_date.isoformat() if store.selected_date else None,
        **store.summary().to_dict(),
    }


@router.get("/filter", response_model=DateFilter)
def get_date_filter(store: LedgerStore = Depends(get_store)):
    return DateFilter(date=store.selected_date)


@router.put("/filter", response_model=DateFilter)
def set_date_filter(date_filter: DateFilter, store: LedgerStore = Depends(get_store)):
    store.set_date_filter(date_filter.date)
    return DateFilter(date=store.selected_date)
