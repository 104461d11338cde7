from __future__ import annotations

WINNING = [3, 7, 15, 22, 40, 61, 90]


def _data(resp):
    body = resp.get_json()
    assert body["success"] is True, body
    return body["data"]


def _complete_ticket(client, serial="000123", numbers=WINNING):
    ticket = _data(client.post("/api/tickets"))
    resp = client.put(
        f"/api/tickets/{ticket['id']}",
        json={"numbers": numbers, "serial_number": serial, "is_checked": True},
    )
    return _data(resp)


def test_health(client):
    assert _data(client.get("/health")) == {"status": "ok"}


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "not_found"


def test_ticket_crud(client):
    created = client.post("/api/tickets")
    assert created.status_code == 201
    ticket = _data(created)
    assert ticket["custom_id"] == "1"
    assert ticket["is_complete"] is False

    updated = _complete_ticket(client)
    assert updated["is_checked"] is True
    assert updated["is_complete"] is True

    listed = _data(client.get("/api/tickets"))
    assert [t["id"] for t in listed] == [ticket["id"], updated["id"]]
    assert _data(client.get(f"/api/tickets/{updated['id']}"))["serial_number"] == "000123"

    assert client.delete(f"/api/tickets/{ticket['id']}").status_code == 200
    assert client.get(f"/api/tickets/{ticket['id']}").status_code == 404


def test_invalid_numbers_rejected(client):
    ticket = _data(client.post("/api/tickets"))
    resp = client.put(f"/api/tickets/{ticket['id']}", json={"numbers": [1, 2, 3]})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == "validation_error"
    assert "numbers" in body["error"]["details"]


def test_duplicate_serial_conflicts(client):
    _complete_ticket(client, serial="77")
    other = _data(client.post("/api/tickets"))

    resp = client.put(f"/api/tickets/{other['id']}", json={"serial_number": "77"})
    assert resp.status_code == 409

    exists = _data(client.get("/api/tickets/serial-exists?serial_number=77"))
    assert exists == {"exists": True}


def test_batch_actions_and_stats(client):
    _data(client.post("/api/tickets/batch", json={"count": 3}))
    _complete_ticket(client)

    stats = _data(client.get("/api/tickets/stats"))
    assert stats["total"] == 4
    assert stats["complete"] == 1
    assert stats["total_cost"] == 1.0

    removed = _data(client.post("/api/tickets/actions/delete-incomplete"))
    assert removed == {"changed": 3}
    assert client.post("/api/tickets/actions/explode").status_code == 404

    assert _data(client.delete("/api/tickets")) == {"deleted": 1}


def test_fill_numbers_without_history_fails(client):
    client.post("/api/tickets")
    resp = client.post("/api/tickets/actions/fill-numbers", json={})
    assert resp.status_code == 400


def test_game_flow(client):
    _complete_ticket(client)

    assert _data(client.get("/api/game"))["phase"] == "no_game"
    assert client.post("/api/game/draws", json={"number": 5}).status_code == 409

    started = client.post("/api/game/start", json={})
    assert started.status_code == 201
    assert _data(started)["game"]["tables_played"] == 1

    for n in [90, *WINNING[:-1]]:
        client.post("/api/game/draws", json={"number": n})
    assert client.post("/api/game/draws", json={"number": 3}).status_code == 409
    assert client.post("/api/game/draws", json={"number": 0}).status_code == 400

    game = _data(client.get("/api/game"))["game"]
    assert game["drawn_numbers"][0] == 90
    assert game["sorted_drawn_numbers"] == WINNING

    winners = _data(client.get("/api/game/winners"))
    assert [w["serial_number"] for w in winners] == ["000123"]

    opponent = client.post(
        "/api/game/opponent-winners",
        json={"game_type": "secondary", "serial_number": "42", "winning_amount": 3.5},
    )
    assert opponent.status_code == 201

    entry = _data(client.post("/api/game/finish", json={"main_amount": 20}))
    assert entry["total_winnings"] == 20.0
    assert entry["net_profit"] == 19.75
    assert entry["total_opponent_winnings"] == 3.5

    history = _data(client.get("/api/history"))
    assert len(history) == 1
    assert history[0]["winners"][0]["ticket"]["numbers"] == WINNING

    stats = _data(client.get("/api/stats"))
    assert stats["total_games"] == 1
    assert stats["winning_serial_numbers"]["player"] == ["000123"]

    balance = _data(client.get("/api/stats/balance"))
    assert balance["best_game"]["id"] == history[0]["id"]

    recs = _data(client.get("/api/recommendations?count=7"))
    assert recs["available"] is True
    assert sorted(recs["numbers"]) == WINNING
    assert recs["scores"][0]["sources"][0] == "winning"

    assert _data(client.delete(f"/api/history/{history[0]['id']}"))["deleted"] == history[0]["id"]
    assert _data(client.get("/api/history")) == []


def test_recommendations_without_history(client):
    data = _data(client.get("/api/recommendations"))
    assert data == {"available": False, "numbers": [], "scores": []}
    assert client.get("/api/recommendations?count=0").status_code == 400


def test_clear_history(client):
    client.post("/api/game/start", json={"opponent_only": True})
    client.post("/api/game/finish", json={})
    assert len(_data(client.get("/api/history"))) == 1

    client.delete("/api/history")
    assert _data(client.get("/api/history")) == []


def test_blank_serial_clears_and_unchecks(client):
    ticket = _complete_ticket(client)

    cleared = _data(client.put(f"/api/tickets/{ticket['id']}", json={"serial_number": ""}))

    assert cleared["serial_number"] == ""
    assert cleared["is_complete"] is False
    assert cleared["is_checked"] is False
