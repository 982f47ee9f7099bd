from conftest import BUSINESS_ID, OTHER_BUSINESS_ID

DESIGN_BODY = {
    "name": "Summer card",
    "organization_name": "Blue Bottle",
    "description": "Coffee rewards",
    "background_color": "#8B5A2B",
    "total_stamps": 8,
}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_and_fetch(client):
    response = client.post(f"/designs/{BUSINESS_ID}", json=DESIGN_BODY)
    assert response.status_code == 200
    created = response.json()
    assert created["is_active"] is False
    assert created["background_color"] == "rgb(139, 90, 43)"

    fetched = client.get(f"/designs/{BUSINESS_ID}/{created['id']}").json()
    assert fetched["name"] == "Summer card"

    listed = client.get(f"/designs/{BUSINESS_ID}").json()
    assert [d["id"] for d in listed] == [created["id"]]


def test_create_with_missing_required_field(client):
    response = client.post(f"/designs/{BUSINESS_ID}", json={**DESIGN_BODY, "name": ""})
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "VALIDATION_FAILED"
    assert detail["errors"][0]["field"] == "name"


def test_create_with_too_many_fields(client):
    fields = [{"key": f"k{i}", "label": "L", "value": "V"} for i in range(4)]
    response = client.post(f"/designs/{BUSINESS_ID}", json={**DESIGN_BODY, "auxiliary_fields": fields})
    assert response.status_code == 422
    assert response.json()["detail"]["errors"][0]["field"] == "auxiliary_fields"


def test_design_of_other_business_is_404(client, store):
    record = store.seed(OTHER_BUSINESS_ID)
    response = client.get(f"/designs/{BUSINESS_ID}/{record['id']}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Design not found"


def test_active_design_endpoint(client, store):
    assert client.get(f"/designs/{BUSINESS_ID}/active").json() is None
    record = store.seed(is_active=True)
    assert client.get(f"/designs/{BUSINESS_ID}/active").json()["id"] == record["id"]


def test_activate_fans_out_to_passes(client, store, coordinator):
    old = store.seed(is_active=True)
    new = store.seed()

    response = client.post(f"/designs/{BUSINESS_ID}/{new['id']}/activate")

    assert response.status_code == 200
    assert response.json()["is_active"] is True
    assert store.records[old["id"]]["is_active"] is False
    assert coordinator.activated == [(BUSINESS_ID, new["id"])]


def test_activate_active_design_is_409(client, store, coordinator):
    record = store.seed(is_active=True)
    response = client.post(f"/designs/{BUSINESS_ID}/{record['id']}/activate")
    assert response.status_code == 409
    assert coordinator.activated == []


def test_activate_transport_failure_is_502(client, store, coordinator):
    record = store.seed()
    store.fail_on.add("activate")

    response = client.post(f"/designs/{BUSINESS_ID}/{record['id']}/activate")

    assert response.status_code == 502
    assert coordinator.activated == []


def test_update_of_active_strip_refreshes_passes(client, store, coordinator):
    record = store.seed(is_active=True)

    response = client.put(
        f"/designs/{BUSINESS_ID}/{record['id']}",
        json={"stamp_filled_color": "#00ff00"},
    )

    assert response.status_code == 200
    assert response.json()["stamp_filled_color"] == "rgb(0, 255, 0)"
    assert coordinator.updated == [(BUSINESS_ID, record["id"], True)]


def test_update_of_draft_does_not_refresh_passes(client, store, coordinator):
    record = store.seed()
    response = client.put(f"/designs/{BUSINESS_ID}/{record['id']}", json={"total_stamps": 12})
    assert response.status_code == 200
    assert coordinator.updated == []


def test_update_with_null_clears_optional_color(client, store):
    record = store.seed(foreground_color="#000000", icon_color="#ff0000")

    response = client.put(
        f"/designs/{BUSINESS_ID}/{record['id']}",
        json={"foreground_color": None, "icon_color": None},
    )

    assert response.status_code == 200
    assert response.json()["foreground_color"] is None
    assert response.json()["icon_color"] is None
    assert store.records[record["id"]]["foreground_color"] is None


def test_update_cannot_set_is_active(client, store):
    record = store.seed()
    response = client.put(f"/designs/{BUSINESS_ID}/{record['id']}", json={"is_active": True})
    assert response.status_code == 422
    assert store.records[record["id"]]["is_active"] is False


def test_duplicate(client, store):
    record = store.seed(is_active=True, name="Original")
    response = client.post(f"/designs/{BUSINESS_ID}/{record['id']}/duplicate")

    assert response.status_code == 200
    copy = response.json()
    assert copy["id"] != record["id"]
    assert copy["name"] == "Original"
    assert copy["is_active"] is False


def test_delete(client, store):
    draft = store.seed()
    active = store.seed(is_active=True)

    assert client.delete(f"/designs/{BUSINESS_ID}/{active['id']}").status_code == 409
    assert client.delete(f"/designs/{BUSINESS_ID}/{draft['id']}").json() == {"message": "Design deleted"}
    assert client.delete(f"/designs/{BUSINESS_ID}/{draft['id']}").status_code == 404


def test_push(client, store, coordinator):
    draft = store.seed()
    active = store.seed(is_active=True)

    assert client.post(f"/designs/{BUSINESS_ID}/{draft['id']}/push").status_code == 409
    assert client.post(f"/designs/{BUSINESS_ID}/{active['id']}/push").status_code == 200
    assert coordinator.updated == [(BUSINESS_ID, active["id"], True)]


def test_plan_limit_is_403(client, store, service):
    service.enforce_plan_limits = True
    store.seed()

    response = client.post(f"/designs/{BUSINESS_ID}", json=DESIGN_BODY)

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "LIMIT_EXCEEDED"
