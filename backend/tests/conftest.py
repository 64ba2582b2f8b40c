from __future__ import annotations

from typing import Dict, List

import pytest

from app.api.schemas.notifications import DeliveryReport, TokenDelivery


class FakeSnapshot:
    def __init__(self, doc_id: str, data: dict | None):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return self._data


class FakeQuery:
    def __init__(self, docs: Dict[str, dict], error: Exception | None = None, log: list | None = None):
        self._docs = docs
        self._error = error
        self._log = log if log is not None else []

    def where(self, *, filter):
        self._log.append((filter.field_path, filter.op_string, filter.value))
        if filter.op_string != "array_contains":
            raise AssertionError(f"unsupported operator {filter.op_string}")
        matched = {
            doc_id: data
            for doc_id, data in self._docs.items()
            if filter.value in (data or {}).get(filter.field_path, [])
        }
        return FakeQuery(matched, self._error, self._log)

    def stream(self):
        if self._error:
            raise self._error
        return iter([FakeSnapshot(doc_id, data) for doc_id, data in self._docs.items()])


class FakeFirestore:
    """In-memory stand-in for the handful of Firestore calls the services make."""

    def __init__(self, collections: Dict[str, Dict[str, dict]] | None = None):
        self.collections = collections or {}
        self.errors: Dict[str, Exception] = {}
        self.queries: list = []

    def fail_collection(self, name: str, error: Exception) -> None:
        self.errors[name] = error

    def collection(self, name: str) -> FakeQuery:
        return FakeQuery(self.collections.get(name, {}), self.errors.get(name), self.queries)


class FakeGateway:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.payloads: List = []

    def send_multicast(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return DeliveryReport.from_deliveries(
            [TokenDelivery(token=token, success=True, message_id=f"msg-{i}") for i, token in enumerate(payload.tokens)]
        )


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def firestore_db():
    return FakeFirestore()
