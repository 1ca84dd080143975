"""
API tests for register session opening, closing and reporting.

Runs against an in-memory SQLite database seeded with a small PKR catalog
(5000, 1000 and 500 notes plus a 1 coin) and one register on branch 1.
"""

from cashdrawer.models import RegisterAuditLog, RegisterSession


def _line(denomination_id, quantity, amount):
    return {"denomination_id": denomination_id, "quantity": quantity, "amount": amount}


def _open(client, register_id, ids, declared="11000", lines=None, **extra):
    if lines is None:
        lines = [_line(ids["5000 Note"], 2, "10000.00"), _line(ids["1000 Note"], 1, "1000.00")]
    body = {"register_id": register_id, "declared_balance": declared, "denomination_breakdown": lines, **extra}
    return client.post("/api/v1/register-sessions/open", json=body, headers={"X-User-Id": "cashier-1"})


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_reconcile_preview_balanced(client, denomination_ids):
    ids = denomination_ids
    r = client.post(
        "/api/v1/register-sessions/reconcile",
        json={
            "mode": "opening",
            "declared_balance": "10500",
            "counts": {str(ids["5000 Note"]): 2, str(ids["500 Note"]): "1", str(ids["1 Coin"]): 40},
        },
    )
    assert r.status_code == 200
    data = r.json()
    assert data["calculated_total"] == "10500.00"
    assert data["difference"] == "0.00"
    assert data["is_balanced"] is True
    assert data["accepted"] is True
    assert data["denomination_breakdown"] == [
        {"denomination_id": ids["5000 Note"], "quantity": 2, "amount": "10000.00"},
        {"denomination_id": ids["500 Note"], "quantity": 1, "amount": "500.00"},
    ]


def test_reconcile_preview_unbalanced(client, denomination_ids):
    r = client.post(
        "/api/v1/register-sessions/reconcile",
        json={"mode": "closing", "declared_balance": "100", "counts": {str(denomination_ids["1000 Note"]): 0}},
    )
    data = r.json()
    assert r.status_code == 200
    assert data["accepted"] is False
    assert data["error_code"] == "unbalanced"
    assert "100.00" in data["error_message"] and "0.00" in data["error_message"]
    assert data["difference"] == "100.00"


def test_reconcile_preview_missing_declared(client):
    r = client.post("/api/v1/register-sessions/reconcile", json={"mode": "opening", "declared_balance": ""})
    data = r.json()
    assert data["accepted"] is False
    assert data["error_code"] == "missing_declared_balance"


def test_open_session_persists_breakdown_and_audit(client, db_session, register_id, denomination_ids):
    r = _open(client, register_id, denomination_ids, notes="morning float")
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["status"] == "open"
    assert data["declared_opening_balance"] == "11000.00"
    assert data["calculated_opening_balance"] == "11000.00"
    assert data["opened_by"] == "cashier-1"
    assert data["session_number"].startswith(f"REG-{register_id}-")

    lines = client.get(f"/api/v1/register-sessions/{data['id']}/denominations", params={"type": "opening"}).json()
    assert [(line["denomination_name"], line["quantity"], line["amount"]) for line in lines] == [
        ("5000 Note", 2, "10000.00"),
        ("1000 Note", 1, "1000.00"),
    ]

    audit = db_session.query(RegisterAuditLog).filter_by(session_id=data["id"]).one()
    assert audit.action == "session_opened"
    assert audit.amount_cents == 1100000
    assert audit.diff_json["denomination_count"] == 2


def test_open_rejects_unbalanced_count(client, db_session, register_id, denomination_ids):
    r = _open(client, register_id, denomination_ids, declared="12000")
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "unbalanced"
    assert "12000.00" in body["message"] and "11000.00" in body["message"]
    assert db_session.query(RegisterSession).count() == 0


def test_open_rejects_missing_declared_balance(client, register_id, denomination_ids):
    r = _open(client, register_id, denomination_ids, declared="")
    assert r.status_code == 400
    assert r.json()["code"] == "missing_declared_balance"


def test_open_ignores_client_amounts(client, register_id, denomination_ids):
    lines = [_line(denomination_ids["5000 Note"], 2, "99999.00")]
    r = _open(client, register_id, denomination_ids, declared="10000", lines=lines)
    assert r.status_code == 201
    assert r.json()["calculated_opening_balance"] == "10000.00"


def test_open_coins_are_not_stored(client, register_id, denomination_ids):
    lines = [_line(denomination_ids["500 Note"], 2, "1000.00"), _line(denomination_ids["1 Coin"], 30, "30.00")]
    r = _open(client, register_id, denomination_ids, declared="1000", lines=lines)
    assert r.status_code == 201
    session_id = r.json()["id"]

    stored = client.get(f"/api/v1/register-sessions/{session_id}/denominations?type=opening").json()
    assert [line["denomination_id"] for line in stored] == [denomination_ids["500 Note"]]


def test_open_rejects_unknown_and_duplicate_denominations(client, register_id, denomination_ids):
    r = _open(client, register_id, denomination_ids, lines=[_line(999, 1, "1.00")])
    assert r.status_code == 400
    assert "Unknown denomination" in r.json()["detail"]

    note = denomination_ids["1000 Note"]
    r = _open(client, register_id, denomination_ids, declared="2000", lines=[_line(note, 1, "1000.00"), _line(note, 1, "1000.00")])
    assert r.status_code == 400
    assert "Duplicate denomination" in r.json()["detail"]


def test_open_unknown_register(client, denomination_ids):
    r = _open(client, 4242, denomination_ids)
    assert r.status_code == 404


def test_second_open_conflicts(client, register_id, denomination_ids):
    assert _open(client, register_id, denomination_ids).status_code == 201
    r = _open(client, register_id, denomination_ids)
    assert r.status_code == 409


def test_active_session_lookup(client, register_id, denomination_ids):
    assert client.get(f"/api/v1/register-sessions/active/{register_id}").status_code == 404
    opened = _open(client, register_id, denomination_ids).json()
    r = client.get(f"/api/v1/register-sessions/active/{register_id}")
    assert r.status_code == 200
    assert r.json()["id"] == opened["id"]


def test_close_session_without_expected_has_no_discrepancy(client, register_id, denomination_ids):
    opened = _open(client, register_id, denomination_ids).json()
    r = client.post(
        f"/api/v1/register-sessions/{opened['id']}/close",
        json={
            "declared_balance": "15000",
            "denomination_breakdown": [_line(denomination_ids["5000 Note"], 3, "15000.00")],
        },
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["status"] == "closed"
    assert data["calculated_closing_balance"] == "15000.00"
    assert data["expected_closing_balance"] == "15000.00"
    assert data["discrepancy_amount"] == "0.00"
    assert client.get(f"/api/v1/register-sessions/active/{register_id}").status_code == 404

    closing = client.get(f"/api/v1/register-sessions/{opened['id']}/denominations?type=closing").json()
    assert [(line["quantity"], line["amount"]) for line in closing] == [(3, "15000.00")]


def test_close_with_expected_balance_reports_discrepancy(client, register_id, denomination_ids):
    opened = _open(client, register_id, denomination_ids).json()
    r = client.post(
        f"/api/v1/register-sessions/{opened['id']}/close",
        json={
            "declared_balance": "15000",
            "denomination_breakdown": [_line(denomination_ids["5000 Note"], 3, "15000.00")],
            "expected_balance": "15500.00",
        },
    )
    assert r.status_code == 200
    assert r.json()["discrepancy_amount"] == "500.00"

    reports = client.get("/api/v1/register-sessions/discrepancies/1").json()
    assert len(reports) == 1
    assert reports[0]["session_id"] == opened["id"]
    assert reports[0]["register_name"] == "Front Till"
    assert reports[0]["discrepancy_amount"] == "500.00"

    assert client.get("/api/v1/register-sessions/discrepancies/2").json() == []


def test_close_rejected_keeps_session_open(client, register_id, denomination_ids):
    opened = _open(client, register_id, denomination_ids).json()
    r = client.post(
        f"/api/v1/register-sessions/{opened['id']}/close",
        json={"declared_balance": "500", "denomination_breakdown": [_line(denomination_ids["500 Note"], 0, "0.00")]},
    )
    assert r.status_code == 400
    assert r.json()["code"] == "unbalanced"
    assert client.get(f"/api/v1/register-sessions/active/{register_id}").json()["id"] == opened["id"]


def test_close_twice_conflicts(client, register_id, denomination_ids):
    opened = _open(client, register_id, denomination_ids).json()
    body = {"declared_balance": "500", "denomination_breakdown": [_line(denomination_ids["500 Note"], 1, "500.00")]}
    assert client.post(f"/api/v1/register-sessions/{opened['id']}/close", json=body).status_code == 200
    assert client.post(f"/api/v1/register-sessions/{opened['id']}/close", json=body).status_code == 409


def test_close_unknown_session(client, denomination_ids):
    body = {"declared_balance": "500", "denomination_breakdown": [_line(denomination_ids["500 Note"], 1, "500.00")]}
    assert client.post("/api/v1/register-sessions/9999/close", json=body).status_code == 404


def test_history_newest_first(client, register_id, denomination_ids):
    first = _open(client, register_id, denomination_ids).json()
    body = {"declared_balance": "500", "denomination_breakdown": [_line(denomination_ids["500 Note"], 1, "500.00")]}
    client.post(f"/api/v1/register-sessions/{first['id']}/close", json=body)
    second = _open(client, register_id, denomination_ids).json()

    history = client.get(f"/api/v1/register-sessions/history/{register_id}").json()
    assert [s["id"] for s in history] == [second["id"], first["id"]]
    assert first["session_number"] != second["session_number"]


def test_denomination_breakdown_rejects_bad_type(client, register_id, denomination_ids):
    opened = _open(client, register_id, denomination_ids).json()
    r = client.get(f"/api/v1/register-sessions/{opened['id']}/denominations?type=midday")
    assert r.status_code == 400


def test_open_with_only_coins_is_rejected(client, db_session, register_id, denomination_ids):
    lines = [_line(denomination_ids["1 Coin"], 5, "5.00")]
    r = _open(client, register_id, denomination_ids, declared="0.005", lines=lines)
    assert r.status_code == 400
    assert r.json()["code"] == "no_denominations_entered"
    assert db_session.query(RegisterSession).count() == 0


def test_reconcile_preview_out_of_range_declared(client, denomination_ids):
    r = client.post(
        "/api/v1/register-sessions/reconcile",
        json={"mode": "opening", "declared_balance": "1e30", "counts": {str(denomination_ids["5000 Note"]): 1}},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["accepted"] is False
    assert data["error_code"] == "missing_declared_balance"
    assert data["calculated_total"] == "5000.00"


def test_open_out_of_range_declared(client, register_id, denomination_ids):
    r = _open(client, register_id, denomination_ids, declared="1" * 30)
    assert r.status_code == 400
    assert r.json()["code"] == "missing_declared_balance"
