import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel

CashFlowType = Literal["inflow", "outflow"]
CashFlowStatus = Literal["confirmed", "pending", "paid"]


class CashFlowCreate(BaseModel):
    description: str = ""
    type: CashFlowType
    amount: float = 0.0
    date: dt.date
    category: str = "other"
    status: Optional[CashFlowStatus] = None
    payment_method: Optional[str] = None


class CashFlowUpdate(BaseModel):
    description: Optional[str] = None
    type: Optional[CashFlowType] = None
    amount: Optional[float] = None
    date: Optional[dt.date] = None
    category: Optional[str] = None
    status: Optional[CashFlowStatus] = None
    payment_method: Optional[str] = None


class CashFlowEntry(CashFlowCreate):
    id: str
    created_at: Optional[str] = None
