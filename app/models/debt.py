import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.models.operational_cost import OperationalCost

DebtStatus = Literal["pending", "negotiating", "overdue", "resolved"]


class DebtCreate(BaseModel):
    creditor: str
    description: str = ""
    amount: float = 0.0
    installments: int = Field(default=1, ge=1)
    installment_value: float = 0.0
    due_date: dt.date
    justification: str = ""
    additional_terms: str = ""
    status: DebtStatus = "pending"


class DebtUpdate(BaseModel):
    creditor: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    installments: Optional[int] = Field(default=None, ge=1)
    installment_value: Optional[float] = None
    due_date: Optional[dt.date] = None
    justification: Optional[str] = None
    additional_terms: Optional[str] = None
    status: Optional[DebtStatus] = None


class Debt(DebtCreate):
    id: str
    total_with_interest: float = 0.0
    created_at: Optional[str] = None


class DebtCreated(BaseModel):
    debt: Debt
    installment_cost: Optional[OperationalCost] = None
