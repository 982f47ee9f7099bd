import io

from PIL import Image

from conftest import BUSINESS_ID, OTHER_BUSINESS_ID

DRAFT = {
    "name": "Draft",
    "organization_name": "Blue Bottle Coffee",
    "description": "Coffee rewards",
    "total_stamps": 9,
}


def test_render_editor_surface(client):
    response = client.post("/previews/render/editor?filled=4", json=DRAFT)

    assert response.status_code == 200
    data = response.json()
    assert data["surface"] == "editor"
    assert data["logo_initials"] == "BB"
    assert len(data["row1"]) == 5
    assert len(data["row2"]) == 4
    assert data["filled_stamps"] == 4


def test_render_tilt_surface_with_pointer(client):
    response = client.post(
        "/previews/render/tilt?pointer_x=0&pointer_y=0&width=300&height=200",
        json=DRAFT,
    )
    tilt = response.json()["tilt"]
    assert tilt["rotate_x"] == 4.0
    assert tilt["rotate_y"] == -4.0


def test_unknown_surface_is_rejected(client):
    assert client.post("/previews/render/hologram", json=DRAFT).status_code == 422


def test_strip_png_for_draft(client):
    response = client.post("/previews/strip.png?stamps=3", json=DRAFT)

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert Image.open(io.BytesIO(response.content)).size == (1125, 432)


def test_strip_png_for_saved_design(client, store):
    record = store.seed()
    other = store.seed(OTHER_BUSINESS_ID)

    assert client.get(f"/previews/{BUSINESS_ID}/{record['id']}/strip.png?stamps=2").status_code == 200
    assert client.get(f"/previews/{BUSINESS_ID}/{other['id']}/strip.png").status_code == 404


def test_placeholder_code_png(client):
    response = client.get("/previews/placeholder-code.png?size=100")
    assert response.status_code == 200
    assert response.content.startswith(b"\x89PNG")


def test_out_of_range_stamp_count_is_rejected(client):
    body = dict(DRAFT, total_stamps=500)

    assert client.post("/previews/render/editor", json=body).status_code == 422
    assert client.post("/previews/strip.png", json=body).status_code == 422
    assert client.post("/previews/render/compact", json=dict(DRAFT, total_stamps=1)).status_code == 422


def test_editor_surface_carries_scan_code_image(client):
    data = client.post("/previews/render/editor", json=DRAFT).json()
    assert data["code_image"].startswith("data:image/png;base64,")

    compact = client.post("/previews/render/compact", json=DRAFT).json()
    assert "code_image" not in compact
