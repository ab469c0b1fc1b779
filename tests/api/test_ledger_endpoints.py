import json

import pytest
from fastapi.testclient import TestClient

from queen_of_hearts.domain import TERMINAL_CARD
from queen_of_hearts.main import app
from queen_of_hearts.runtime import get_service
from queen_of_hearts.service import LedgerService


@pytest.fixture
def client(service: LedgerService):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _start_game(client: TestClient, **overrides) -> dict:
    response = client.post("/games", json={"name": "Game 1", "start_date": "2024-03-04", **overrides})
    assert response.status_code == 201
    return response.json()


def _add_week(client: TestClient, game_id: int, start_date: str = "2024-03-04") -> dict:
    response = client.post(f"/games/{game_id}/weeks", json={"start_date": start_date})
    assert response.status_code == 201
    return response.json()


def test_game_lifecycle_contract(client: TestClient) -> None:
    game = _start_game(client)
    assert game["game_number"] == 1
    assert game["is_completed"] is False
    assert set(game["totals"]) >= {"total_sales", "organization_net_profit", "jackpot_shortfall_covered"}

    week = _add_week(client, game["id"])
    assert week["week_number"] == 1
    assert week["end_date"] == "2024-03-10"

    entry = client.post(
        f"/games/{game['id']}/weeks/{week['id']}/entries",
        json={"sale_date": "2024-03-04", "tickets_sold": 250},
    )
    assert entry.status_code == 200
    entry_json = entry.json()
    assert entry_json["sale"]["jackpot_total"] == pytest.approx(300.0)
    assert entry_json["validation"]["is_valid"] is True

    shown = client.get(f"/games/{game['id']}/displayed-jackpot")
    assert shown.status_code == 200
    assert shown.json()["displayed_jackpot"] == pytest.approx(500.0)

    preview = client.get(
        f"/games/{game['id']}/weeks/{week['id']}/ending-jackpot", params={"weekly_payout": 100}
    )
    assert preview.status_code == 200
    assert preview.json()["ending_jackpot"] == pytest.approx(200.0)

    winner = client.post(
        f"/games/{game['id']}/weeks/{week['id']}/winner",
        json={"winner_name": "Bo", "card_selected": TERMINAL_CARD, "slot_chosen": 17},
    )
    assert winner.status_code == 200
    winner_json = winner.json()
    assert winner_json["payout"] == pytest.approx(500.0)
    assert winner_json["game_completed"] is True
    assert winner_json["week"]["card_selected"] == TERMINAL_CARD

    loss = client.get(f"/games/{game['id']}/jackpot-loss")
    assert loss.status_code == 200
    assert loss.json()["total_jackpot_loss"] == pytest.approx(200.0)
    assert loss.json()["weekly_breakdown"][0]["minimum_shortfall"] == pytest.approx(200.0)

    totals = client.get(f"/games/{game['id']}/totals")
    assert totals.status_code == 200
    assert totals.json()["is_valid"] is True

    fetched = client.get(f"/games/{game['id']}")
    assert fetched.json()["is_completed"] is True
    assert fetched.json()["totals"]["final_jackpot_payout"] == pytest.approx(500.0)


def test_unknown_game_error_shape(client: TestClient) -> None:
    response = client.get("/games/404")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "game_not_found"
    assert response.json()["detail"]["details"] == {"game_id": 404}


def test_week_from_another_game_is_not_found(client: TestClient) -> None:
    first = _start_game(client)
    second = _start_game(client, name="Game 2")
    week = _add_week(client, second["id"])

    response = client.post(
        f"/games/{first['id']}/weeks/{week['id']}/entries",
        json={"sale_date": "2024-03-04", "tickets_sold": 5},
    )

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "week_not_found"


def test_unknown_card_is_a_validation_error(client: TestClient) -> None:
    game = _start_game(client)
    week = _add_week(client, game["id"])

    response = client.post(
        f"/games/{game['id']}/weeks/{week['id']}/winner",
        json={"winner_name": "Ann", "card_selected": "Eleven of Cups"},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_error"


def test_completed_game_conflict(client: TestClient) -> None:
    game = _start_game(client)
    completed = client.post(f"/games/{game['id']}/complete", json={"contribution_to_next_game": 25})
    assert completed.status_code == 200
    assert completed.json()["jackpot_contribution_to_next_game"] == pytest.approx(25.0)

    response = client.post(f"/games/{game['id']}/weeks", json={"start_date": "2024-03-11"})

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "game_already_completed"


def test_mismatched_percentages_are_rejected(client: TestClient) -> None:
    response = client.post(
        "/games",
        json={"name": "Game 1", "organization_percentage": 40, "jackpot_percentage": 55},
    )

    assert response.status_code == 422


def test_expense_endpoint(client: TestClient) -> None:
    game = _start_game(client)

    response = client.post(
        f"/games/{game['id']}/expenses",
        json={"amount": 40, "is_donation": True, "description": "scholarship", "expense_date": "2024-03-05"},
    )

    assert response.status_code == 201
    assert response.json()["is_donation"] is True
    assert client.get(f"/games/{game['id']}").json()["totals"]["total_donations"] == pytest.approx(40.0)


def test_configuration_endpoints(client: TestClient) -> None:
    current = client.get("/configuration")
    assert current.status_code == 200
    assert current.json()["card_payouts"][TERMINAL_CARD] == "jackpot"

    updated = client.put("/configuration", json={"penalty_percentage": 15, "ticket_price": 3})

    assert updated.status_code == 200
    assert updated.json()["penalty_percentage"] == 15
    assert updated.json()["version"] == 2
    assert _start_game(client)["ticket_price"] == 3


def test_invalid_configuration_is_rejected(client: TestClient) -> None:
    response = client.put("/configuration", json={"organization_percentage": 70})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "validation_error"


def test_audit_endpoints(client: TestClient) -> None:
    game = _start_game(client)
    client.get(f"/games/{game['id']}/displayed-jackpot")
    client.get(f"/games/{game['id']}/totals")

    listed = client.get("/audit", params={"operation": "displayed_jackpot"})
    assert listed.status_code == 200
    assert [entry["operation"] for entry in listed.json()] == ["displayed_jackpot"]

    exported = client.get("/audit/export", params={"game_id": game["id"]})
    assert exported.status_code == 200
    assert exported.headers["content-type"].startswith("application/json")
    assert json.loads(exported.text)["count"] == 2
