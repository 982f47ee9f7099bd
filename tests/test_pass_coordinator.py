import asyncio
import json

import httpx

from cardstudio.domain.schemas import CardDesign
from cardstudio.services.pass_coordinator import PassCoordinator, affects_strips
from conftest import make_content


def _design(**overrides) -> CardDesign:
    return CardDesign(id="d1", business_id="b1", is_active=True, **make_content(**overrides).content())


def test_affects_strips_only_for_changed_strip_fields():
    design = _design(total_stamps=10)

    assert affects_strips({"total_stamps": 12}, design)
    assert not affects_strips({"total_stamps": 10}, design)
    assert not affects_strips({"name": "Other", "description": "New"}, design)
    assert affects_strips({"reward_icon": "star"}, design)


def test_activation_posts_refresh_request():
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202, json={"passes": 12})

    coordinator = PassCoordinator(
        base_url="https://passes.example",
        token="secret",
        transport=httpx.MockTransport(handler),
    )
    result = asyncio.run(coordinator.on_design_activated("b1", _design()))

    assert result["notified"] is True
    assert result["response"] == {"passes": 12}
    request = captured[0]
    assert request.url.path == "/businesses/b1/designs/d1/refresh"
    assert request.headers["Authorization"] == "Bearer secret"
    body = json.loads(request.content)
    assert body["reason"] == "activated"
    assert body["regenerate_strips"] is True
    assert body["design"]["id"] == "d1"


def test_update_passes_regenerate_flag():
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(204)

    coordinator = PassCoordinator(base_url="https://passes.example", transport=httpx.MockTransport(handler))
    result = asyncio.run(coordinator.on_design_updated("b1", _design(), regenerate_strips=False))

    assert result["notified"] is True
    assert result["response"] == {}
    assert captured[0]["reason"] == "updated"
    assert captured[0]["regenerate_strips"] is False


def test_service_errors_are_reported_not_raised():
    coordinator = PassCoordinator(
        base_url="https://passes.example",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    result = asyncio.run(coordinator.on_design_activated("b1", _design()))

    assert result["notified"] is False
    assert "500" in result["error"]


def test_disabled_without_service_url():
    coordinator = PassCoordinator(base_url="")
    result = asyncio.run(coordinator.on_design_activated("b1", _design()))

    assert coordinator.enabled is False
    assert result == {"design_id": "d1", "reason": "activated", "notified": False}
