"""
Entry Classifier
Asks a language model to turn a free-text financial note into a structured
guess. Any failure is answered with a fallback object instead of an exception.
"""
import json
import logging
from datetime import date
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.models.classifier import UNPROCESSED_DESCRIPTION, normalize_guess

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a financial assistant that categorizes business ledger entries.

Analyze the description and return a single JSON object with these fields:
- entryType: "cashflow", "operational" or "negotiation"
- type: "inflow" or "outflow"
- amount: estimated numeric value (0 when not stated)
- category: one of "food", "transport", "health", "education", "entertainment", "utilities", "salary", "investment", "financial", "other"
- paymentMethod: "cash", "credit", "debit", "pix", "transfer" or "other"
- status: "confirmed", "pending" or "paid"
- suggestedDescription: a short, clean version of the original description
For entryType "negotiation" also return creditor, installments, installmentValue and dueDate (YYYY-MM-DD).

Always return valid JSON. When something is unclear, make the best estimate from context.

Examples:
- "Bought a snack for $15" -> {"entryType": "cashflow", "type": "outflow", "amount": 15, "category": "food", "paymentMethod": "other", "status": "confirmed", "suggestedDescription": "Snack"}
- "Received salary" -> {"entryType": "cashflow", "type": "inflow", "amount": 0, "category": "salary", "paymentMethod": "transfer", "status": "confirmed", "suggestedDescription": "Salary"}
- "Paid the electricity bill $120" -> {"entryType": "operational", "type": "outflow", "amount": 120, "category": "utilities", "paymentMethod": "other", "status": "paid", "suggestedDescription": "Electricity bill"}"""


def fallback_entry(description: Optional[str] = None, error: Optional[str] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "entryType": "cashflow",
        "type": "outflow",
        "amount": 0,
        "category": "other",
        "paymentMethod": "other",
        "status": "pending",
        "suggestedDescription": description or UNPROCESSED_DESCRIPTION,
        "date": date.today().isoformat(),
    }
    if error:
        entry["error"] = error
    return entry


def _strip_fences(content: str) -> str:
    if not isinstance(content, str):
        raise TypeError(f"Expected text content, got {type(content).__name__}")
    content = content.strip()
    if content.startswith("```"):
        content = content.strip("`")
        if content.lower().startswith("json"):
            content = content[4:]
    return content.strip()


class EntryClassifier:
    """Thin client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.CLASSIFIER_MODEL
        self.client = httpx.Client(
            base_url=(base_url or settings.OPENAI_BASE_URL).rstrip("/"),
            timeout=timeout or settings.CLASSIFIER_TIMEOUT,
            transport=transport,
        )

    def close(self):
        self.client.close()

    def classify(self, description: str) -> Any:
        """
        Return the model's raw JSON answer with today's date added, or a
        fallback object carrying an ``error`` message.
        """
        if not self.api_key:
            logger.error("Classifier called without OPENAI_API_KEY configured")
            return fallback_entry(error="OPENAI_API_KEY is not configured")

        logger.debug(f"Classifying entry ({len(description)} chars)")
        try:
            response = self.client.post(
                "/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": description},
                    ],
                    "max_tokens": 500,
                    "temperature": 0.3,
                },
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except httpx.HTTPStatusError as e:
            logger.error(f"Classifier API error: {e.response.status_code} {e.response.text}")
            return fallback_entry(error=f"Classifier API error: {e.response.status_code}")
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Classifier request failed: {str(e)}")
            return fallback_entry(error=str(e))

        try:
            processed = json.loads(_strip_fences(content))
        except (TypeError, ValueError) as e:
            logger.error(f"Error parsing classifier response: {str(e)}")
            return fallback_entry(description=description)

        if isinstance(processed, dict):
            processed["date"] = date.today().isoformat()
        return processed

    def guess(self, description: str):
        """Classify and normalize in one step."""
        return normalize_guess(self.classify(description))
