import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)

# Logical table names used by the ledger
CASH_FLOW = "cash_flow_entries"
OPERATIONAL_COSTS = "operational_costs"
DEBTS = "debts"


class PersistenceError(Exception):
    """Raised when DynamoDB rejects or fails a ledger operation."""

    def __init__(self, operation: str, table: str, message: str):
        self.operation = operation
        self.table = table
        super().__init__(f"{operation} on {table} failed: {message}")


def _error_message(e: Exception) -> str:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Message", str(e))
    return str(e)


class DynamoGateway:
    """
    CRUD access to the three ledger tables.

    Every table is keyed by a string ``id`` partition key. The gateway assigns
    ``id`` and ``created_at`` on insert and always hands back the canonical row
    as stored, with Decimals turned back into native numbers.
    """

    def __init__(self, tables: Optional[Dict[str, Any]] = None):
        if tables is None:
            dynamodb = boto3.resource(
                "dynamodb",
                region_name=settings.DYNAMO_REGION,
                endpoint_url=settings.DYNAMO_ENDPOINT_URL,
            )
            tables = {
                CASH_FLOW: dynamodb.Table(settings.DYNAMO_CASH_FLOW_TABLE),
                OPERATIONAL_COSTS: dynamodb.Table(settings.DYNAMO_OPERATIONAL_COSTS_TABLE),
                DEBTS: dynamodb.Table(settings.DYNAMO_DEBTS_TABLE),
            }
        self.tables = tables

    def insert(self, table: str, item: dict) -> dict:
        """Insert a new row and return it with its assigned id."""
        row = {
            **item,
            "id": str(uuid4()),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.tables[table].put_item(
                Item=_convert_for_dynamo(row),
                ConditionExpression="attribute_not_exists(id)",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"insert into {table} failed: {_error_message(e)}")
            raise PersistenceError("insert", table, _error_message(e)) from e
        return _from_dynamo(_convert_for_dynamo(row))

    def update(self, table: str, item_id: str, updates: dict) -> Optional[dict]:
        """
        Apply partial updates to a row. Returns the updated row, or None when
        no row with that id exists.
        """
        if not updates:
            return None

        set_parts = []
        remove_parts = []
        expression_attribute_values = {}
        expression_attribute_names = {"#pk": "id"}

        for idx, (key, value) in enumerate(updates.items()):
            placeholder = f"#f{idx}"
            expression_attribute_names[placeholder] = key
            # Clearing an optional field removes the attribute
            if value is None:
                remove_parts.append(placeholder)
                continue
            value_placeholder = f":v{idx}"
            set_parts.append(f"{placeholder} = {value_placeholder}")
            expression_attribute_values[value_placeholder] = value

        update_expression = " ".join(
            clause
            for clause in (
                "SET " + ", ".join(set_parts) if set_parts else "",
                "REMOVE " + ", ".join(remove_parts) if remove_parts else "",
            )
            if clause
        )
        update_kwargs: Dict[str, Any] = {
            "Key": {"id": item_id},
            "UpdateExpression": update_expression,
            "ConditionExpression": "attribute_exists(#pk)",
            "ExpressionAttributeNames": expression_attribute_names,
            "ReturnValues": "ALL_NEW",
        }
        if expression_attribute_values:
            update_kwargs["ExpressionAttributeValues"] = _convert_for_dynamo(expression_attribute_values)

        try:
            response = self.tables[table].update_item(**update_kwargs)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return None
            logger.error(f"update on {table} failed: {_error_message(e)}")
            raise PersistenceError("update", table, _error_message(e)) from e
        except BotoCoreError as e:
            logger.error(f"update on {table} failed: {e}")
            raise PersistenceError("update", table, str(e)) from e

        attributes = response.get("Attributes")
        return _from_dynamo(attributes) if attributes else None

    def delete(self, table: str, item_id: str) -> bool:
        """Delete a row. Returns whether a row was actually removed."""
        try:
            response = self.tables[table].delete_item(
                Key={"id": item_id},
                ReturnValues="ALL_OLD",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"delete on {table} failed: {_error_message(e)}")
            raise PersistenceError("delete", table, _error_message(e)) from e
        return "Attributes" in response

    def select_all(self, table: str) -> List[dict]:
        """Scan a whole table, most recently created first."""
        items: List[dict] = []
        scan_kwargs: Dict[str, Any] = {}
        try:
            while True:
                response = self.tables[table].scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            logger.error(f"select on {table} failed: {_error_message(e)}")
            raise PersistenceError("select", table, _error_message(e)) from e

        rows = [_from_dynamo(item) for item in items]
        rows.sort(key=lambda row: row.get("created_at") or "", reverse=True)
        return rows


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility and drop
    None values, which DynamoDB cannot store as key-less attributes.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
