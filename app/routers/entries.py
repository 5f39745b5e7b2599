"""
Smart Entries Router
Free-text classification and confirmation of the (possibly edited) guess
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.dynamo import PersistenceError
from app.dependencies import get_classifier, get_store
from app.models.classifier import ClassifierRequest, EntryGuess, NegotiationGuess
from app.utils.classifier import EntryClassifier
from app.utils.ledger import LedgerStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/classify", response_model=EntryGuess)
def classify_entry(request: ClassifierRequest, classifier: EntryClassifier = Depends(get_classifier)):
    """
    Ask the classifier for a structured guess. The guess is always well
    formed; a failed classification carries an ``error`` message and default
    values for the user to edit.
    """
    if not request.description.strip():
        raise HTTPException(status_code=400, detail="Description is required")
    return EntryGuess(classifier.guess(request.description))


@router.post("/confirm", status_code=status.HTTP_201_CREATED)
def confirm_entry(payload: EntryGuess, store: LedgerStore = Depends(get_store)) -> Dict:
    """Store a confirmed guess as a cash-flow entry, operational cost or debt."""
    guess = payload.root
    draft = guess.to_draft()
    try:
        if isinstance(guess, NegotiationGuess):
            debt, installment = store.add_debt(draft)
            record = {
                "debt": debt.model_dump(mode="json"),
                "installment_cost": installment.model_dump(mode="json") if installment else None,
            }
        elif guess.entry_type == "operational":
            record = store.add_operational_cost(draft).model_dump(mode="json")
        else:
            record = store.add_cash_flow_entry(draft).model_dump(mode="json")
    except PersistenceError as e:
        logger.error(f"Saving confirmed {guess.entry_type} entry failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to save entry: {e}")

    return {"entry_type": guess.entry_type, "record": record}
