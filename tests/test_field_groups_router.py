from app.models import ActivityLog


def create_group(client, key="profile", **extra):
    response = client.post("/api/field-groups", json={"title": key.title(), "key": key, **extra})
    assert response.status_code == 201
    return response.json()


def create_field(client, group_id, key, **extra):
    payload = {"label": key.title(), "key": key, "type": "text", **extra}
    response = client.post(f"/api/field-groups/{group_id}/fields", json=payload)
    assert response.status_code == 201
    return response.json()


def test_create_and_list_field_groups(client, db):
    # Setup
    group = create_group(client, "profile", description="Extra profile data")

    # Act
    response = client.get("/api/field-groups")

    # Assert
    assert response.status_code == 200
    groups = response.json()["field_groups"]
    assert len(groups) == 1
    assert groups[0]["id"] == group["id"]
    assert groups[0]["public_url"] == "/form/profile"
    assert groups[0]["submissions_count"] == 0
    assert db.query(ActivityLog).filter(ActivityLog.action == "CREATE").count() == 1


def test_duplicate_group_key_returns_409(client):
    create_group(client, "profile")

    response = client.post("/api/field-groups", json={"title": "Other", "key": "profile"})

    assert response.status_code == 409
    assert "profile" in response.json()["detail"]


def test_invalid_group_payload_returns_422(client):
    response = client.post("/api/field-groups", json={"title": ""})

    assert response.status_code == 422


def test_get_missing_group_returns_404(client):
    response = client.get("/api/field-groups/999")

    assert response.status_code == 404


def test_update_group(client, db):
    group = create_group(client, "profile")

    response = client.put(f"/api/field-groups/{group['id']}", json={"title": "User profile", "active": False})

    assert response.status_code == 200
    assert response.json()["title"] == "User profile"
    assert response.json()["active"] is False
    entry = db.query(ActivityLog).filter(ActivityLog.action == "UPDATE").one()
    assert entry.details["changes"]["title"] == {"old": "Profile", "new": "User profile"}
    assert entry.actor == "admin@example.com"


def test_delete_group(client):
    group = create_group(client, "profile")
    create_field(client, group["id"], "phone")

    response = client.delete(f"/api/field-groups/{group['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Field group deleted successfully"}
    assert client.get(f"/api/field-groups/{group['id']}").status_code == 404


def test_create_field_with_typed_blobs(client):
    group = create_group(client, "profile")

    field = create_field(
        client, group["id"], "department",
        type="select",
        choices={"sales": "Sales", "hr": "HR"},
        wrapper={"width": "50", "class": "half"},
        conditional_logic=[[{"field": "phone", "operator": "not_empty"}]],
    )

    assert field["type"] == "select"
    assert field["name"] == "department"
    assert field["order"] == 0
    assert field["wrapper"] == {"width": "50", "class": "half"}
    assert field["conditional_logic"] == [[{"field": "phone", "operator": "not_empty"}]]


def test_create_field_with_unknown_type_returns_422(client):
    group = create_group(client, "profile")

    response = client.post(
        f"/api/field-groups/{group['id']}/fields",
        json={"label": "X", "key": "x", "type": "hologram"},
    )

    assert response.status_code == 422


def test_duplicate_field_key_returns_409(client):
    first = create_group(client, "first")
    second = create_group(client, "second")
    create_field(client, first["id"], "color")

    response = client.post(
        f"/api/field-groups/{second['id']}/fields",
        json={"label": "Color", "key": "color", "type": "text"},
    )

    assert response.status_code == 409


def test_reorder_fields(client):
    group = create_group(client, "profile")
    ids = [create_field(client, group["id"], key)["id"] for key in ("a", "b", "c")]

    response = client.post(
        f"/api/field-groups/{group['id']}/reorder-fields",
        json={"field_ids": [ids[2], ids[0], ids[1]]},
    )

    assert response.status_code == 200
    fields = response.json()["fields"]
    assert [f["key"] for f in fields] == ["c", "a", "b"]
    assert [f["order"] for f in fields] == [0, 1, 2]


def test_set_field_orders_with_unknown_id_returns_404(client):
    group = create_group(client, "profile")
    field = create_field(client, group["id"], "a")

    ok = client.post(
        f"/api/field-groups/{group['id']}/fields/reorder",
        json={"fields": [{"id": field["id"], "order": 4}]},
    )
    missing = client.post(
        f"/api/field-groups/{group['id']}/fields/reorder",
        json={"fields": [{"id": 999, "order": 0}]},
    )

    assert ok.status_code == 200
    assert ok.json()["fields"][0]["order"] == 4
    assert missing.status_code == 404


def test_custom_field_endpoints(client):
    group = create_group(client, "profile")
    field = create_field(client, group["id"], "phone", placeholder="+1")

    fetched = client.get(f"/api/custom-fields/{field['id']}")
    updated = client.put(f"/api/custom-fields/{field['id']}", json={"label": "Mobile", "required": True})
    deleted = client.delete(f"/api/custom-fields/{field['id']}")

    assert fetched.json()["placeholder"] == "+1"
    assert updated.json()["label"] == "Mobile"
    assert updated.json()["required"] is True
    assert updated.json()["placeholder"] == "+1"
    assert deleted.json() == {"message": "Custom field deleted successfully"}
    assert client.get(f"/api/custom-fields/{field['id']}").status_code == 404


def test_update_field_to_taken_key_returns_409(client):
    group = create_group(client, "profile")
    create_field(client, group["id"], "a")
    b = create_field(client, group["id"], "b")

    response = client.put(f"/api/custom-fields/{b['id']}", json={"key": "a"})

    assert response.status_code == 409
