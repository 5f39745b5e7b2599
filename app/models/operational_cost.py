import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel

CostType = Literal["fixed", "variable"]

# Convention shared by every installment cost derived from a debt.
INSTALLMENT_CATEGORY = "financial"
INSTALLMENT_PREFIX = "Installment - "


def installment_description(creditor: str) -> str:
    return f"{INSTALLMENT_PREFIX}{creditor}"


class OperationalCostCreate(BaseModel):
    description: str = ""
    type: CostType
    amount: float = 0.0
    date: dt.date
    category: str = "other"
    debt_id: Optional[str] = None  # set only on installment costs


class OperationalCostUpdate(BaseModel):
    description: Optional[str] = None
    type: Optional[CostType] = None
    amount: Optional[float] = None
    date: Optional[dt.date] = None
    category: Optional[str] = None


class OperationalCost(OperationalCostCreate):
    id: str
    created_at: Optional[str] = None
