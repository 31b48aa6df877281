import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from finance_tracker.core.config import settings

logger = logging.getLogger(__name__)

# Initialize DynamoDB resource
dynamodb = boto3.resource("dynamodb", region_name=settings.DYNAMO_REGION)

# Get table references
transactions_table = dynamodb.Table(settings.DYNAMO_TABLE_TRANSACTIONS)
categories_table = dynamodb.Table(settings.DYNAMO_TABLE_CATEGORIES)
budgets_table = dynamodb.Table(settings.DYNAMO_TABLE_BUDGETS)
profiles_table = dynamodb.Table(settings.DYNAMO_TABLE_PROFILES)


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message", str(e))


def _query_all(table, key_condition) -> List[Dict[str, Any]]:
    """Run a query and follow LastEvaluatedKey until every page is read."""
    items: List[Dict[str, Any]] = []
    kwargs = {"KeyConditionExpression": key_condition}
    while True:
        response = table.query(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return [_from_dynamo(item) for item in items]
        kwargs["ExclusiveStartKey"] = last_key


def _owner_query(table, user_id: str, sort_key: str, prefix: str = ""):
    condition = Key("user_id").eq(user_id)
    if prefix:
        condition = condition & Key(sort_key).begins_with(prefix)
    return _query_all(table, condition)


def _update_item(table, key: Dict[str, str], updates: dict):
    """
    Apply partial updates to an item. Returns the updated item or None.
    """
    if not updates:
        return None

    update_expression_parts = []
    expression_attribute_values = {}
    expression_attribute_names = {}

    for idx, (field, value) in enumerate(updates.items()):
        placeholder = f"#f{idx}"
        value_placeholder = f":v{idx}"
        update_expression_parts.append(f"{placeholder} = {value_placeholder}")
        expression_attribute_names[placeholder] = field
        expression_attribute_values[value_placeholder] = value

    try:
        response = table.update_item(
            Key=key,
            UpdateExpression="SET " + ", ".join(update_expression_parts),
            ConditionExpression="attribute_exists(user_id)",
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
            ReturnValues="ALL_NEW",
        )
    except ClientError as e:
        # Missing item, not a store failure
        if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
            return None
        raise
    attributes = response.get("Attributes")
    return _from_dynamo(attributes) if attributes else None


# Transactions (sort key: "<YYYY-MM-DD>_<id>" so a month is a key prefix)

def put_transaction(transaction_item: dict) -> bool:
    """Insert or replace a transaction for a user."""
    try:
        transactions_table.put_item(Item=_convert_for_dynamo(transaction_item))
        return True
    except ClientError as e:
        logger.error(f"put_transaction failed: {_error_message(e)}")
        return False


def get_transaction(user_id: str, transaction_id: str):
    """Fetch a single transaction item."""
    try:
        response = transactions_table.get_item(Key={"user_id": user_id, "transaction_id": transaction_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_transaction failed: {_error_message(e)}")
        return None


def list_transactions(user_id: str, month_prefix: str = "") -> List[Dict[str, Any]]:
    """
    Query the transactions of a user, optionally limited to a month.
    month_prefix: '2025-11' matches all items with SK like '2025-11-04_...'
    """
    try:
        return _owner_query(transactions_table, user_id, "transaction_id", month_prefix)
    except ClientError as e:
        logger.error(f"list_transactions failed: {_error_message(e)}")
        return []


def update_transaction(user_id: str, transaction_id: str, updates: dict):
    try:
        return _update_item(
            transactions_table,
            {"user_id": user_id, "transaction_id": transaction_id},
            updates,
        )
    except ClientError as e:
        logger.error(f"update_transaction failed: {_error_message(e)}")
        return None


def delete_transaction(user_id: str, transaction_id: str) -> bool:
    """Delete a specific transaction item."""
    try:
        response = transactions_table.delete_item(
            Key={"user_id": user_id, "transaction_id": transaction_id},
            ReturnValues="ALL_OLD",
        )
        return "Attributes" in response
    except ClientError as e:
        logger.error(f"delete_transaction failed: {_error_message(e)}")
        return False


# Categories

def put_category(category_item: dict) -> bool:
    try:
        categories_table.put_item(Item=_convert_for_dynamo(category_item))
        return True
    except ClientError as e:
        logger.error(f"put_category failed: {_error_message(e)}")
        return False


def get_category(user_id: str, category_id: str):
    try:
        response = categories_table.get_item(Key={"user_id": user_id, "category_id": category_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_category failed: {_error_message(e)}")
        return None


def list_categories(user_id: str) -> List[Dict[str, Any]]:
    try:
        return _owner_query(categories_table, user_id, "category_id")
    except ClientError as e:
        logger.error(f"list_categories failed: {_error_message(e)}")
        return []


def update_category(user_id: str, category_id: str, updates: dict):
    try:
        return _update_item(categories_table, {"user_id": user_id, "category_id": category_id}, updates)
    except ClientError as e:
        logger.error(f"update_category failed: {_error_message(e)}")
        return None


def delete_category(user_id: str, category_id: str) -> bool:
    try:
        response = categories_table.delete_item(
            Key={"user_id": user_id, "category_id": category_id},
            ReturnValues="ALL_OLD",
        )
        return "Attributes" in response
    except ClientError as e:
        logger.error(f"delete_category failed: {_error_message(e)}")
        return False


def category_names(user_id: str) -> Dict[str, str]:
    """Resolve a user's category ids to display names."""
    return {c["category_id"]: c["name"] for c in list_categories(user_id)}


def count_category_references(user_id: str, category_id: str) -> Optional[Dict[str, int]]:
    """
    Count transactions and budgets that still point at a category.
    Returns None when the store cannot be read.
    """
    try:
        transactions = _owner_query(transactions_table, user_id, "transaction_id")
        budgets = _owner_query(budgets_table, user_id, "budget_id")
    except ClientError as e:
        logger.error(f"count_category_references failed: {_error_message(e)}")
        return None
    return {
        "transactions": sum(1 for t in transactions if t.get("category_id") == category_id),
        "budgets": sum(1 for b in budgets if b.get("category_id") == category_id),
    }


# Budgets (sort key: "<YYYY-MM>#<category_id>", one budget per category and month)

def put_budget(budget_item: dict) -> bool:
    try:
        budgets_table.put_item(Item=_convert_for_dynamo(budget_item))
        return True
    except ClientError as e:
        logger.error(f"put_budget failed: {_error_message(e)}")
        return False


def get_budget(user_id: str, budget_id: str):
    try:
        response = budgets_table.get_item(Key={"user_id": user_id, "budget_id": budget_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_budget failed: {_error_message(e)}")
        return None


def list_budgets(user_id: str, month: str = "") -> List[Dict[str, Any]]:
    try:
        return _owner_query(budgets_table, user_id, "budget_id", f"{month}#" if month else "")
    except ClientError as e:
        logger.error(f"list_budgets failed: {_error_message(e)}")
        return []


def update_budget(user_id: str, budget_id: str, updates: dict):
    try:
        return _update_item(budgets_table, {"user_id": user_id, "budget_id": budget_id}, updates)
    except ClientError as e:
        logger.error(f"update_budget failed: {_error_message(e)}")
        return None


def delete_budget(user_id: str, budget_id: str) -> bool:
    try:
        response = budgets_table.delete_item(
            Key={"user_id": user_id, "budget_id": budget_id},
            ReturnValues="ALL_OLD",
        )
        return "Attributes" in response
    except ClientError as e:
        logger.error(f"delete_budget failed: {_error_message(e)}")
        return False


# Profiles (one item per user, keyed by user_id only)

def get_profile(user_id: str):
    try:
        response = profiles_table.get_item(Key={"user_id": user_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_profile failed: {_error_message(e)}")
        return None


def put_profile(profile_item: dict) -> bool:
    """Insert or replace the profile of a user."""
    try:
        profiles_table.put_item(Item=_convert_for_dynamo(profile_item))
        return True
    except ClientError as e:
        logger.error(f"put_profile failed: {_error_message(e)}")
        return False


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
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
