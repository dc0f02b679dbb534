import uuid

import pytest


@pytest.mark.unit
def test_list_categories_includes_types(client, category):
    resp = client.get("/api/categories")

    assert resp.status_code == 200
    (item,) = resp.get_json()
    assert item["_id"] == category.id
    assert [t["name"] for t in item["types"]] == ["Evening", "Morning"]


@pytest.mark.unit
def test_get_category(client, category):
    assert client.get(f"/api/categories/{category.id}").get_json()["name"] == "Meditation"
    assert client.get("/api/categories/oops").status_code == 400
    assert client.get(f"/api/categories/{uuid.uuid4().hex}").status_code == 404


@pytest.mark.unit
def test_admin_creates_category_with_types(admin_client):
    resp = admin_client.post(
        "/api/categories",
        json={"name": "Sleep", "description": "Wind down", "types": ["Short", {"name": "Long", "description": "1h+"}]},
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["name"] == "Sleep"
    assert {t["name"]: t["description"] for t in body["types"]} == {"Long": "1h+", "Short": None}


@pytest.mark.unit
def test_create_category_validation(admin_client, category):
    missing = admin_client.post("/api/categories", json={"description": "no name"})
    assert missing.status_code == 400
    assert missing.get_json()["missing"] == ["name"]

    duplicate = admin_client.post("/api/categories", json={"name": "Meditation"})
    assert duplicate.status_code == 409


@pytest.mark.unit
def test_add_type_to_category(admin_client, category):
    resp = admin_client.post(f"/api/categories/{category.id}/types", json={"name": "Afternoon"})

    assert resp.status_code == 201
    assert [t["name"] for t in resp.get_json()["types"]] == ["Afternoon", "Evening", "Morning"]


@pytest.mark.unit
def test_delete_category_leaves_music_with_null_category(admin_client, category, factories):
    music = factories.MusicFactory(category_id=category.id, category_type_id=category.types[0].id)

    resp = admin_client.delete(f"/api/categories/{category.id}")
    assert resp.status_code == 200

    item = admin_client.get(f"/api/music/{music.id}").get_json()
    assert item["category"] is None
    assert item["categoryType"] is None


@pytest.mark.unit
def test_category_writes_require_admin(client, category):
    assert client.post("/api/categories", json={"name": "X"}).status_code == 401
    assert client.delete(f"/api/categories/{category.id}").status_code == 401
