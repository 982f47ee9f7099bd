import itertools
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from cardstudio.api.deps import get_design_service, get_pass_coordinator
from cardstudio.core.exceptions import TransportFailure
from cardstudio.domain.schemas import CardDesignContent
from cardstudio.main import create_app
from cardstudio.services.design_service import CardDesignService

BUSINESS_ID = "biz-1"
OTHER_BUSINESS_ID = "biz-2"


def make_content(**overrides) -> CardDesignContent:
    data = {
        "name": "Summer card",
        "organization_name": "Blue Bottle",
        "description": "Coffee rewards",
    }
    data.update(overrides)
    return CardDesignContent(**data)


class InMemoryDesignStore:
    """Stands in for the external design API, one dict per stored design."""

    def __init__(self):
        self.records: dict[str, dict] = {}
        self.requests: list[str] = []
        self.fail_on: set[str] = set()
        # When set, activation promotes the target but leaves siblings active
        self.skip_demotion = False
        self._clock = itertools.count()

    def _request(self, operation: str) -> None:
        self.requests.append(operation)
        if operation in self.fail_on:
            raise TransportFailure(operation, "connection refused")

    def _timestamp(self) -> str:
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        return (start + timedelta(seconds=next(self._clock))).isoformat()

    def seed(self, business_id: str = BUSINESS_ID, is_active: bool = False, **overrides) -> dict:
        record = make_content(**overrides).content()
        now = self._timestamp()
        record.update(
            id=str(uuid.uuid4()),
            business_id=business_id,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        self.records[record["id"]] = record
        return dict(record)

    def create(self, business_id: str, **fields) -> dict | None:
        self._request("create")
        now = self._timestamp()
        record = dict(
            fields,
            id=str(uuid.uuid4()),
            business_id=business_id,
            is_active=False,
            created_at=now,
            updated_at=now,
        )
        self.records[record["id"]] = record
        return dict(record)

    def get_by_id(self, design_id: str) -> dict | None:
        self._request("fetch")
        record = self.records.get(design_id)
        return dict(record) if record else None

    def get_active(self, business_id: str) -> dict | None:
        self._request("active")
        for record in self.records.values():
            if record["business_id"] == business_id and record["is_active"]:
                return dict(record)
        return None

    def get_all(self, business_id: str) -> list[dict]:
        self._request("list")
        records = [dict(r) for r in self.records.values() if r["business_id"] == business_id]
        return sorted(records, key=lambda r: r["created_at"], reverse=True)

    def update(self, design_id: str, **kwargs) -> dict | None:
        self._request("update")
        if design_id not in self.records:
            return None
        kwargs.pop("is_active", None)
        self.records[design_id].update(kwargs, updated_at=self._timestamp())
        return dict(self.records[design_id])

    def delete(self, design_id: str) -> bool:
        self._request("delete")
        return self.records.pop(design_id, None) is not None

    def set_active(self, business_id: str, design_id: str) -> dict | None:
        self._request("activate")
        for record in self.records.values():
            if record["business_id"] != business_id:
                continue
            if record["id"] == design_id:
                record["is_active"] = True
            elif not self.skip_demotion:
                record["is_active"] = False
        record = self.records.get(design_id)
        return dict(record) if record else None

    def count(self, business_id: str) -> int:
        self._request("count")
        return sum(1 for r in self.records.values() if r["business_id"] == business_id)


class FakeBusinessStore:
    def __init__(self):
        self.businesses = {
            BUSINESS_ID: {"id": BUSINESS_ID, "name": "Blue Bottle", "subscription_tier": "pay"},
            OTHER_BUSINESS_ID: {"id": OTHER_BUSINESS_ID, "name": "Red Door", "subscription_tier": "pro"},
        }

    def get_by_id(self, business_id: str) -> dict | None:
        return self.businesses.get(business_id)


class RecordingCoordinator:
    """Collects pass refresh requests instead of calling the pass service."""

    def __init__(self):
        self.activated: list[tuple[str, str]] = []
        self.updated: list[tuple[str, str, bool]] = []

    async def on_design_activated(self, business_id, design) -> dict:
        self.activated.append((business_id, design.id))
        return {"design_id": design.id, "notified": True}

    async def on_design_updated(self, business_id, design, regenerate_strips=True) -> dict:
        self.updated.append((business_id, design.id, regenerate_strips))
        return {"design_id": design.id, "notified": True}


@pytest.fixture
def store():
    return InMemoryDesignStore()


@pytest.fixture
def businesses():
    return FakeBusinessStore()


@pytest.fixture
def service(store, businesses):
    return CardDesignService(
        store=store,
        businesses=businesses,
        verify_attempts=2,
        enforce_plan_limits=False,
    )


@pytest.fixture
def coordinator():
    return RecordingCoordinator()


@pytest.fixture
def client(service, coordinator):
    app = create_app()
    app.dependency_overrides[get_design_service] = lambda: service
    app.dependency_overrides[get_pass_coordinator] = lambda: coordinator
    return TestClient(app)
