from cashdrawer.routers.denominations import load_definitions


def test_list_active_in_sort_order(client):
    r = client.get("/api/v1/denomination-types/")
    assert r.status_code == 200
    data = r.json()
    assert [d["name"] for d in data] == ["5000 Note", "1000 Note", "500 Note", "1 Coin"]
    assert data[0]["value"] == "5000.00"
    assert data[-1]["kind"] == "coin"


def test_create_and_deactivate(client):
    r = client.post("/api/v1/denomination-types/", json={"name": "100 Note", "value": "100", "kind": "note", "sort_order": 4})
    assert r.status_code == 201
    created = r.json()
    assert created["value"] == "100.00"
    assert created["is_active"] is True

    r = client.patch(f"/api/v1/denomination-types/{created['id']}", json={"is_active": False})
    assert r.status_code == 200
    names = [d["name"] for d in client.get("/api/v1/denomination-types/").json()]
    assert "100 Note" not in names


def test_create_rejects_non_positive_value(client):
    r = client.post("/api/v1/denomination-types/", json={"name": "Zero", "value": "0", "kind": "note"})
    assert r.status_code == 422


def test_create_rejects_unknown_kind(client):
    r = client.post("/api/v1/denomination-types/", json={"name": "Token", "value": "1", "kind": "token"})
    assert r.status_code == 422


def test_patch_unknown(client):
    assert client.patch("/api/v1/denomination-types/999", json={"name": "x"}).status_code == 404


def test_load_definitions_feeds_engine(db_session):
    definitions = load_definitions(db_session)
    assert [str(d.value) for d in definitions] == ["5000.00", "1000.00", "500.00", "1.00"]
    assert [d.is_note for d in definitions] == [True, True, True, False]


def test_inactive_denomination_cannot_be_counted(client, register_id, denomination_ids):
    client.patch(f"/api/v1/denomination-types/{denomination_ids['500 Note']}", json={"is_active": False})
    r = client.post(
        "/api/v1/register-sessions/open",
        json={
            "register_id": register_id,
            "declared_balance": "500",
            "denomination_breakdown": [{"denomination_id": denomination_ids["500 Note"], "quantity": 1, "amount": "500.00"}],
        },
    )
    assert r.status_code == 400


def test_registers_listing(client):
    r = client.post("/api/v1/registers/", json={"name": "Back Till", "branch_id": 2})
    assert r.status_code == 201
    assert [x["name"] for x in client.get("/api/v1/registers/", params={"branch_id": 2}).json()] == ["Back Till"]
    assert len(client.get("/api/v1/registers/").json()) == 2


def test_create_rejects_out_of_range_value(client):
    r = client.post("/api/v1/denomination-types/", json={"name": "Huge", "value": "1e30", "kind": "note"})
    assert r.status_code == 422
