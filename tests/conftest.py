"""
Pytest configuration and shared fixtures.

API tests run against an in-memory stand-in for the DynamoDB helpers so no AWS
account is needed.
"""
import jwt
import pytest
from fastapi.testclient import TestClient

from finance_tracker.core.config import settings
from finance_tracker.db import dynamo
from finance_tracker.main import app
from finance_tracker.utils import export

USER_ID = "user-123"


class InMemoryStore:
    def __init__(self):
        self.tables = {"transactions": {}, "categories": {}, "budgets": {}, "profiles": {}}

    def put(self, table, sort_key):
        def _put(item):
            self.tables[table][(item["user_id"], item[sort_key])] = dict(item)
            return True
        return _put

    def get(self, table):
        def _get(user_id, key):
            item = self.tables[table].get((user_id, key))
            return dict(item) if item else None
        return _get

    def list(self, table):
        def _list(user_id, prefix=""):
            return [
                dict(item) for (owner, key), item in sorted(self.tables[table].items())
                if owner == user_id and key.startswith(prefix)
            ]
        return _list

    def update(self, table):
        def _update(user_id, key, updates):
            item = self.tables[table].get((user_id, key))
            if not item or not updates:
                return None
            item.update(updates)
            return dict(item)
        return _update

    def delete(self, table):
        def _delete(user_id, key):
            return self.tables[table].pop((user_id, key), None) is not None
        return _delete

    def count_references(self, user_id, category_id):
        counts = {}
        for table in ("transactions", "budgets"):
            counts[table] = sum(
                1 for (owner, _), item in self.tables[table].items()
                if owner == user_id and item.get("category_id") == category_id
            )
        return counts

    def get_profile(self, user_id):
        item = self.tables["profiles"].get((user_id, "profile"))
        return dict(item) if item else None

    def put_profile(self, item):
        self.tables["profiles"][(item["user_id"], "profile")] = dict(item)
        return True


@pytest.fixture
def store(monkeypatch):
    fake = InMemoryStore()
    monkeypatch.setattr(dynamo, "put_transaction", fake.put("transactions", "transaction_id"))
    monkeypatch.setattr(dynamo, "get_transaction", fake.get("transactions"))
    monkeypatch.setattr(dynamo, "list_transactions", fake.list("transactions"))
    monkeypatch.setattr(dynamo, "update_transaction", fake.update("transactions"))
    monkeypatch.setattr(dynamo, "delete_transaction", fake.delete("transactions"))
    monkeypatch.setattr(dynamo, "put_category", fake.put("categories", "category_id"))
    monkeypatch.setattr(dynamo, "get_category", fake.get("categories"))
    monkeypatch.setattr(dynamo, "list_categories", fake.list("categories"))
    monkeypatch.setattr(dynamo, "update_category", fake.update("categories"))
    monkeypatch.setattr(dynamo, "delete_category", fake.delete("categories"))
    monkeypatch.setattr(dynamo, "put_budget", fake.put("budgets", "budget_id"))
    monkeypatch.setattr(dynamo, "get_budget", fake.get("budgets"))
    monkeypatch.setattr(dynamo, "list_budgets", lambda user_id, month="": fake.list("budgets")(
        user_id, f"{month}#" if month else ""))
    monkeypatch.setattr(dynamo, "update_budget", fake.update("budgets"))
    monkeypatch.setattr(dynamo, "delete_budget", fake.delete("budgets"))
    monkeypatch.setattr(dynamo, "count_category_references", fake.count_references)
    monkeypatch.setattr(dynamo, "get_profile", fake.get_profile)
    monkeypatch.setattr(dynamo, "put_profile", fake.put_profile)
    return fake


@pytest.fixture
def uploads(monkeypatch):
    uploaded = []

    def fake_upload(user_id, month, content, report_id):
        uploaded.append({"user_id": user_id, "month": month, "content": content})
        return f"https://example-bucket/exports/{user_id}/{report_id}.csv"

    monkeypatch.setattr(export, "upload_csv", fake_upload)
    return uploaded


@pytest.fixture
def auth_headers():
    token = jwt.encode(
        {"sub": USER_ID, "aud": settings.JWT_AUDIENCE},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def user_id():
    return USER_ID
