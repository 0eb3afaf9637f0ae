"""HTTP surface: status codes, error bodies and end-to-end flows through TestClient."""
import pytest
from fastapi.testclient import TestClient


def _create_event(client: TestClient, **fields) -> dict:
    body = {"name": "Open Singles", "format": "groups", "best_of": 1}
    body.update(fields)
    response = client.post("/api/events", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _register(client: TestClient, event_id: int, count: int) -> list:
    ids = []
    for i in range(count):
        response = client.post(
            f"/api/events/{event_id}/registrations",
            json={"player_ids": [i + 1], "display_name": f"Player {i + 1}"},
        )
        assert response.status_code == 201, response.text
        ids.append(response.json()["id"])
    return ids


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_and_get_event(client: TestClient):
    event = _create_event(client, format="single-elimination", best_of=3, has_third_place_match=True)

    assert event["format"] == "single-elimination"
    assert event["completed"] is False
    fetched = client.get(f"/api/events/{event['id']}").json()
    assert fetched["has_third_place_match"] is True
    assert client.get("/api/events/999").status_code == 404


@pytest.mark.parametrize(
    "fields",
    [{"best_of": 2}, {"best_of": 0}, {"name": "   "}, {"format": "swiss"}, {"players_per_heat": 51}],
)
def test_invalid_event_payloads(client: TestClient, fields):
    body = {"name": "Event", "format": "groups", "best_of": 1}
    body.update(fields)
    assert client.post("/api/events", json=body).status_code == 422


def test_registrations(client: TestClient):
    event = _create_event(client)
    ids = _register(client, event["id"], 3)

    listed = client.get(f"/api/events/{event['id']}/registrations").json()
    assert [r["id"] for r in listed] == ids
    assert listed[0]["player_ids"] == [1]
    assert client.post(f"/api/events/{event['id']}/registrations", json={"player_ids": []}).status_code == 422


def test_group_flow(client: TestClient):
    event = _create_event(client, best_of=3)
    ids = _register(client, event["id"], 3)

    created = client.post("/api/groups", json={"event_id": event["id"], "registration_ids": ids})
    assert created.status_code == 201, created.text
    assert created.json()["group"]["name"] == "A"
    assert created.json()["match_count"] == 3

    groups = client.get(f"/api/events/{event['id']}/groups").json()
    assert [g["name"] for g in groups] == ["A"]

    matches = client.get(f"/api/events/{event['id']}/matches").json()
    assert len(matches) == 3
    assert {m["state"] for m in matches} == {"scheduled"}

    group_id = created.json()["group"]["id"]
    assert client.delete(f"/api/groups/{group_id}").status_code == 204
    assert client.get(f"/api/events/{event['id']}/matches").json() == []
    assert client.delete(f"/api/groups/{group_id}").status_code == 404


def test_group_with_foreign_registration_reports_ids(client: TestClient):
    event = _create_event(client)
    ids = _register(client, event["id"], 2)

    response = client.post("/api/groups", json={"event_id": event["id"], "registration_ids": ids + [777]})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["kind"] == "validation"
    assert detail["invalid_ids"] == [777]


def test_set_scoring_flow(client: TestClient):
    event = _create_event(client, best_of=3)
    ids = _register(client, event["id"], 2)
    client.post("/api/groups", json={"event_id": event["id"], "registration_ids": ids})
    match_id = client.get(f"/api/events/{event['id']}/matches").json()[0]["id"]

    for number, (s1, s2) in enumerate([(11, 5), (9, 11), (11, 7)], start=1):
        added = client.post(
            f"/api/matches/{match_id}/sets",
            json={"set_number": number, "registration1_score": s1, "registration2_score": s2},
        )
        assert added.status_code == 201, added.text
        played = client.patch(f"/api/sets/{added.json()['id']}/played")
        assert played.status_code == 200, played.text

    assert played.json()["match_completed"] is True
    assert played.json()["winner_id"] == ids[0]

    match = client.get(f"/api/matches/{match_id}").json()
    assert match["state"] == "completed"
    assert [s["set_number"] for s in match["sets"]] == [1, 2, 3]
    assert client.get(f"/api/events/{event['id']}").json()["completed"] is True

    late = client.post(
        f"/api/matches/{match_id}/sets",
        json={"set_number": 4, "registration1_score": 11, "registration2_score": 0},
    )
    assert late.status_code == 400
    assert late.json()["detail"]["kind"] == "conflict"


def test_set_edit_and_delete(client: TestClient):
    event = _create_event(client, best_of=3)
    ids = _register(client, event["id"], 2)
    client.post("/api/groups", json={"event_id": event["id"], "registration_ids": ids})
    match_id = client.get(f"/api/events/{event['id']}/matches").json()[0]["id"]

    set_id = client.post(
        f"/api/matches/{match_id}/sets",
        json={"set_number": 1, "registration1_score": 10, "registration2_score": 10},
    ).json()["id"]
    tied = client.patch(f"/api/sets/{set_id}/played")
    assert tied.status_code == 400
    assert tied.json()["detail"]["kind"] == "validation"

    updated = client.patch(f"/api/sets/{set_id}", json={"registration2_score": 12})
    assert updated.json()["registration2_score"] == 12
    # recorded but not yet played
    match = client.get(f"/api/matches/{match_id}").json()
    assert (match["state"], len(match["sets"])) == ("scheduled", 1)

    assert client.patch(f"/api/sets/{set_id}/played").status_code == 200
    assert client.get(f"/api/matches/{match_id}").json()["state"] == "in_progress"
    assert client.delete(f"/api/sets/{set_id}").status_code == 400

    second_id = client.post(
        f"/api/matches/{match_id}/sets",
        json={"set_number": 2, "registration1_score": 3, "registration2_score": 1},
    ).json()["id"]
    assert client.delete(f"/api/sets/{second_id}").status_code == 204
    assert len(client.get(f"/api/matches/{match_id}").json()["sets"]) == 1


def test_explicit_match_completion_errors(client: TestClient):
    event = _create_event(client, best_of=3)
    ids = _register(client, event["id"], 2)
    client.post("/api/groups", json={"event_id": event["id"], "registration_ids": ids})
    match_id = client.get(f"/api/events/{event['id']}/matches").json()[0]["id"]

    assert client.patch(f"/api/matches/{match_id}", json={"played": False}).status_code == 400
    no_sets = client.patch(f"/api/matches/{match_id}", json={"played": True})
    assert no_sets.status_code == 400
    assert no_sets.json()["detail"]["kind"] == "conflict"
    assert client.patch("/api/matches/999", json={"played": True}).status_code == 404


def test_heats_endpoints(client: TestClient):
    event = _create_event(client, format="tests")
    _register(client, event["id"], 9)
    url = f"/api/events/{event['id']}/heats"

    generated = client.post(f"{url}/generate", json={"players_per_heat": 4, "shuffle_registrations": False})
    assert generated.status_code == 201, generated.text
    body = generated.json()
    assert body["total_heats"] == 3
    assert [h["registration_count"] for h in body["heats"]] == [4, 4, 1]

    again = client.post(f"{url}/generate", json={"players_per_heat": 4})
    assert again.status_code == 400
    assert again.json()["detail"]["kind"] == "conflict"

    regenerated = client.post(f"{url}/generate", json={"players_per_heat": 5, "regenerate": True})
    assert regenerated.status_code == 201
    assert regenerated.json()["total_heats"] == 2

    reset = client.post(f"{url}/reset")
    assert reset.status_code == 200
    assert reset.json() == {"deleted_heats": 2, "deleted_matches": 0}
    assert client.post(f"{url}/reset").status_code == 400


def test_heats_require_tests_format(client: TestClient):
    event = _create_event(client, format="groups")
    _register(client, event["id"], 2)

    response = client.post(f"/api/events/{event['id']}/heats/generate")

    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "format"


def test_bracket_endpoints(client: TestClient):
    event = _create_event(client, format="single-elimination")
    ids = _register(client, event["id"], 9)
    url = f"/api/events/{event['id']}/bracket"

    generated = client.post(
        f"{url}/generate",
        json={"shuffle_registrations": True, "seeds": [{"registration_id": ids[8], "seed": 1}]},
    )
    assert generated.status_code == 201, generated.text
    body = generated.json()
    assert (body["bracket_size"], body["bye_count"], body["total_rounds"]) == (16, 7, 4)
    assert body["match_count"] == len(body["matches"]) == 15
    first = body["matches"][0]
    assert first["registration1_id"] == ids[8]
    assert first["state"] == "completed"

    assert client.post(f"{url}/generate", json={}).status_code == 400
    reset = client.post(f"{url}/reset")
    assert reset.json()["deleted_matches"] == 15
    assert client.post(f"{url}/generate").status_code == 201


def test_bracket_invalid_seed(client: TestClient):
    event = _create_event(client, format="single-elimination")
    _register(client, event["id"], 4)

    response = client.post(
        f"/api/events/{event['id']}/bracket/generate",
        json={"seeds": [{"registration_id": 31337, "seed": 1}]},
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["invalid_ids"] == [31337]
    assert "31337" in detail["message"]
