from conftest import DAY, add_block, add_slot

ME = {"X-User-Id": "me"}
THEM = {"X-User-Id": "them"}


def _window(time_of_day="10:00", duration=15, day=DAY):
    return {"date": day, "time": time_of_day, "duration": duration}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_submit_and_list_availability(client):
    r = client.post("/availability", json={"windows": [_window("10:00"), _window("11:00", 45)]}, headers=ME)
    assert r.status_code == 200
    slots = r.json()["slots"]
    assert [s["state"] for s in slots] == ["open", "open"]

    listed = client.get("/availability", params={"status": "open"}, headers=ME).json()["slots"]
    assert [s["time"] for s in listed] == ["10:00", "11:00"]


def test_submit_requires_user(client):
    r = client.post("/availability", json={"windows": [_window()]})
    assert r.status_code == 401


def test_submit_errors_map_to_status_codes(client):
    r = client.post("/availability", json={"windows": [_window("09:00"), _window("09:05", 5)]}, headers=ME)
    assert r.status_code == 409
    assert r.json()["error"] == "conflicting_window"
    assert r.json()["conflicting_index"] == 0

    r = client.post("/availability", json={"windows": [_window(day="2020-01-01")]}, headers=ME)
    assert r.status_code == 422
    assert r.json()["error"] == "past_window"

    r = client.post("/availability", json={"windows": [_window(duration=30)]}, headers=ME)
    assert r.status_code == 422
    assert r.json()["error"] == "malformed_input"


def test_withdraw(client, db):
    slot = add_slot(db, "me")
    assert client.delete(f"/availability/{slot.id}", headers=THEM).status_code == 403
    assert client.delete(f"/availability/{slot.id}", headers=ME).json() == {"ok": True, "id": slot.id}
    r = client.delete(f"/availability/{slot.id}", headers=ME)
    assert r.status_code == 409
    assert r.json()["error"] == "invalid_state"
    assert client.delete("/availability/missing", headers=ME).status_code == 404


def test_best_matches_per_window(client, db, oracle):
    add_slot(db, "them", "10:00", 15)
    add_slot(db, "blocked", "10:00", 15)
    add_block(db, "me", "blocked")
    oracle.scores = {"them": 64, "blocked": 99}

    r = client.post("/matching/best", json={"windows": [_window("10:00"), _window("12:00")]}, headers=ME)
    assert r.status_code == 200
    body = r.json()
    assert body["matched_count"] == 1
    first, second = body["results"]
    assert first["match"]["slot"]["owner_id"] == "them"
    assert first["match"]["score"] == 64
    assert second["match"] is None


def test_best_matches_with_filters(client, db):
    add_slot(db, "them", "10:00", 15)
    r = client.post(
        "/matching/best",
        json={"windows": [_window()], "filters": {"same_city_required": True}},
        headers=ME,
    )
    assert r.json()["results"][0]["match"] is None


def test_confirm_cancel_flow(client, db):
    mine = add_slot(db, "me")
    theirs = add_slot(db, "them")

    r = client.post(
        "/meetings",
        json={"own_slot_id": mine.id, "candidate_slot_id": theirs.id, "score": 64, "reasons": ["x"]},
        headers=ME,
    )
    assert r.status_code == 200
    meeting = r.json()["meeting"]
    assert meeting["state"] == "scheduled"
    assert meeting["counterpart_id"] == "them"

    again = client.post("/meetings", json={"own_slot_id": mine.id, "candidate_slot_id": theirs.id}, headers=ME)
    assert again.status_code == 409
    assert again.json()["error"] == "slot_no_longer_available"

    listed = client.get("/meetings", headers=THEM).json()["meetings"]
    assert [m["id"] for m in listed] == [meeting["id"]]
    assert listed[0]["counterpart_id"] == "me"

    assert client.post(f"/meetings/{meeting['id']}/cancel", headers={"X-User-Id": "x"}).status_code == 403
    r = client.post(f"/meetings/{meeting['id']}/cancel", headers=THEM)
    assert r.json()["meeting"]["state"] == "cancelled"

    r = client.post(f"/meetings/{meeting['id']}/complete", headers=ME)
    assert r.status_code == 409
    assert r.json()["error"] == "invalid_transition"


def test_no_show_requires_operator_token(client, db):
    mine = add_slot(db, "me")
    theirs = add_slot(db, "them")
    meeting_id = client.post(
        "/meetings", json={"own_slot_id": mine.id, "candidate_slot_id": theirs.id}, headers=ME
    ).json()["meeting"]["id"]

    assert client.post(f"/meetings/{meeting_id}/no-show", headers=ME).status_code == 403
    r = client.post(f"/meetings/{meeting_id}/no-show", headers={"X-Operator-Token": "op-secret"})
    assert r.status_code == 200
    assert r.json()["meeting"]["state"] == "no_show"


def test_suggestions_empty_by_default(client):
    assert client.get("/matching/suggestions", headers=ME).json() == {"suggestions": []}
