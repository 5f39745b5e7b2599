"""
Structured guesses produced by the entry classifier.

The classifier is a language model, so its output is treated as untrusted:
every field is checked on its own and replaced by a default when it is
missing or malformed. A guess is one of three variants, selected by
``entry_type``, and each variant knows how to turn itself into the matching
ledger draft.
"""
import datetime as dt
import math
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, RootModel

from app.models.cash_flow import CashFlowCreate, CashFlowStatus, CashFlowType
from app.models.debt import DebtCreate
from app.models.operational_cost import OperationalCostCreate

DEFAULT_DESCRIPTION = "Processed entry"
UNPROCESSED_DESCRIPTION = "Unprocessed entry"
UNKNOWN_CREDITOR = "Not informed"

ENTRY_TYPES = ("cashflow", "operational", "negotiation")
CASH_FLOW_TYPES = ("inflow", "outflow")
STATUSES = ("confirmed", "pending", "paid")

# LLM output uses camelCase; accept both spellings.
_ALIASES = {
    "entryType": "entry_type",
    "paymentMethod": "payment_method",
    "suggestedDescription": "suggested_description",
    "installmentValue": "installment_value",
    "dueDate": "due_date",
}


class ClassifierRequest(BaseModel):
    description: str


class BaseGuess(BaseModel):
    type: CashFlowType = "outflow"
    amount: float = 0.0
    category: str = "other"
    payment_method: str = "other"
    status: CashFlowStatus = "pending"
    suggested_description: str = DEFAULT_DESCRIPTION
    date: dt.date = Field(default_factory=dt.date.today)
    error: Optional[str] = None


class CashFlowGuess(BaseGuess):
    entry_type: Literal["cashflow"] = "cashflow"

    def to_draft(self) -> CashFlowCreate:
        return CashFlowCreate(
            description=self.suggested_description,
            type=self.type,
            amount=self.amount,
            date=self.date,
            category=self.category,
            status=self.status,
            payment_method=self.payment_method,
        )


class OperationalGuess(BaseGuess):
    entry_type: Literal["operational"] = "operational"

    def to_draft(self) -> OperationalCostCreate:
        return OperationalCostCreate(
            description=self.suggested_description,
            type="variable" if self.type == "outflow" else "fixed",
            amount=self.amount,
            date=self.date,
            category=self.category,
        )


class NegotiationGuess(BaseGuess):
    entry_type: Literal["negotiation"] = "negotiation"
    creditor: Optional[str] = None
    installments: Optional[int] = None
    installment_value: Optional[float] = None
    due_date: Optional[dt.date] = None

    def to_draft(self) -> DebtCreate:
        return DebtCreate(
            creditor=self.creditor or UNKNOWN_CREDITOR,
            description=self.suggested_description,
            amount=self.amount,
            installments=self.installments or 1,
            installment_value=self.installment_value or self.amount,
            due_date=self.due_date or self.date,
            justification=self.suggested_description,
            additional_terms="",
            status="negotiating" if self.status == "confirmed" else "pending",
        )


ClassifierGuess = Annotated[
    Union[CashFlowGuess, OperationalGuess, NegotiationGuess],
    Field(discriminator="entry_type"),
]


class EntryGuess(RootModel[ClassifierGuess]):
    """A guess of any variant; ``entry_type`` selects which."""


_GUESS_TYPES = {
    "cashflow": CashFlowGuess,
    "operational": OperationalGuess,
    "negotiation": NegotiationGuess,
}


def _text(value: Any, default: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _choice(value: Any, allowed, default: str) -> str:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return abs(number)


def _count(value: Any) -> Optional[int]:
    number = _number(value)
    if number is None or number < 1:
        return None
    return int(number)


def _day(value: Any) -> Optional[dt.date]:
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return dt.date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def normalize_guess(raw: Any) -> Union[CashFlowGuess, OperationalGuess, NegotiationGuess]:
    """
    Turn whatever the classifier returned into a well-formed guess.

    A list is unwrapped to its first element; anything that is not a mapping
    is treated as an empty object. Each field falls back to its default on
    its own, so one bad field never discards the rest of the guess.
    """
    if isinstance(raw, list):
        raw = raw[0] if raw else {}
    if not isinstance(raw, dict):
        raw = {}

    data: Dict[str, Any] = {_ALIASES.get(key, key): value for key, value in raw.items()}

    entry_type = _choice(data.get("entry_type"), ENTRY_TYPES, "cashflow")
    fields: Dict[str, Any] = {
        "type": _choice(data.get("type"), CASH_FLOW_TYPES, "outflow"),
        "amount": _number(data.get("amount")) or 0.0,
        "category": _text(data.get("category"), "other"),
        "payment_method": _text(data.get("payment_method"), "other"),
        "status": _choice(data.get("status"), STATUSES, "pending"),
        "suggested_description": _text(data.get("suggested_description"), DEFAULT_DESCRIPTION),
        "date": _day(data.get("date")) or dt.date.today(),
        "error": _text(data.get("error"), None),
    }
    if entry_type == "negotiation":
        fields.update(
            creditor=_text(data.get("creditor"), None),
            installments=_count(data.get("installments")),
            installment_value=_number(data.get("installment_value")),
            due_date=_day(data.get("due_date")),
        )
    return _GUESS_TYPES[entry_type](**fields)
