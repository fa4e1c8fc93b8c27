import json
from typing import Any, Dict, List

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tracker_core_lib.clients import TimelineServiceClient
from tracker_core_lib.config import reset_settings
from tracker_core_lib.identity import InMemoryDeviceStorage, LocalIdentityStore
from tracker_core_lib.models import TimelineRecord


class FakeRecordStore:
    """In-memory PostgREST-style record store served through httpx.MockTransport.

    Supports the subset of query syntax the client uses: `eq.`, `is.true`,
    `is.false`, `is.null`, `order=<col>.<asc|desc>`, `limit`, and the embedded
    `timelines!...(*)` select on comments.
    """

    def __init__(self, timelines=None, comments=None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            "timelines": [dict(row) for row in timelines or []],
            "timeline_comments": [dict(row) for row in comments or []],
        }
        self.requests: List[httpx.Request] = []
        self.fail_with_status = None

    @staticmethod
    def _matches(row, key, condition):
        value = row.get(key)
        if condition == "is.true":
            return value is True
        if condition == "is.false":
            return value is False
        if condition == "is.null":
            return value is None
        if condition.startswith("eq."):
            return value is not None and str(value) == condition[3:]
        raise AssertionError(f"Unsupported filter {key}={condition}")

    def _select(self, table, params):
        rows = list(self.tables[table])
        for key, condition in params.items():
            if key in ("select", "order", "limit"):
                continue
            rows = [row for row in rows if self._matches(row, key, condition)]

        order = params.get("order")
        if order:
            column, direction = order.rsplit(".", 1)
            rows.sort(key=lambda r: r.get(column) or "", reverse=direction == "desc")

        if "limit" in params:
            rows = rows[: int(params["limit"])]

        rows = [dict(row) for row in rows]
        if "timelines!" in params.get("select", ""):
            for row in rows:
                row["timelines"] = next(
                    (t for t in self.tables["timelines"] if t["id"] == row["timeline_id"]), None
                )
        return rows

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with_status:
            return httpx.Response(self.fail_with_status, json={"message": "boom"})

        table = request.url.path.rsplit("/", 1)[-1]
        params = dict(request.url.params)

        if request.method == "GET":
            return httpx.Response(200, json=self._select(table, params))

        if request.method == "POST":
            body = json.loads(request.content)
            rows = self.tables[table]
            body["id"] = max((r["id"] for r in rows), default=0) + 1
            body.setdefault("created_at", "2024-06-01T00:00:00Z")
            if table == "timeline_comments":
                body.setdefault("is_deleted", False)
            rows.append(body)
            return httpx.Response(201, json=[body])

        if request.method == "PATCH":
            body = json.loads(request.content)
            for row in self._select(table, params):
                stored = next(r for r in self.tables[table] if r["id"] == row["id"])
                stored.update(body)
            return httpx.Response(204)

        return httpx.Response(405)

    def requests_with_method(self, method):
        return [r for r in self.requests if r.method == method]


class FakeRedis:
    """Dict-backed stand-in exposing the get/set/delete calls device storage makes."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.data[key] = value
        return True

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0


class BrokenRedis:
    def get(self, key):
        raise RedisConnectionError("connection refused")

    def set(self, key, value, ex=None):
        raise RedisConnectionError("connection refused")

    def delete(self, key):
        raise RedisConnectionError("connection refused")


@pytest.fixture(autouse=True)
def _reset_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_record():
    def _make(id, **fields):
        fields.setdefault("username", f"user{id}")
        return TimelineRecord(id=id, **fields)

    return _make


@pytest.fixture
def fake_store():
    return FakeRecordStore()


@pytest.fixture
def client_for():
    def _client(store: FakeRecordStore) -> TimelineServiceClient:
        return TimelineServiceClient(
            base_url="http://store.test",
            api_key="anon-key",
            transport=httpx.MockTransport(store.handler),
        )

    return _client


@pytest.fixture
def identity_store():
    return LocalIdentityStore(InMemoryDeviceStorage())


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def broken_redis():
    return BrokenRedis()
