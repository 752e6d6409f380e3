import sys
import os
import pytest
from fastapi.testclient import TestClient

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from backgammon import api
from backgammon.errors import ContractViolation

client = TestClient(api.app)


def start(**settings):
    response = client.post("/start", json=settings)
    assert response.status_code == 200
    return response.json()


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_start_returns_state():
    state = start(player1_name="Ana", target_score=5)
    assert state["phase"] == "ROLL_DICE"
    assert state["turn"] == 0
    assert state["board"][23] == 2
    assert state["board"][0] == -2
    assert state["players"][0]["name"] == "Ana"
    assert state["players"][0]["direction"] == -1
    assert state["players"][1]["ai"] is True
    assert state["pips"] == [167, 167]
    assert state["affordances"]["dice"] is True
    assert state["can_double"] is True


def test_start_rejects_bad_target():
    response = client.post("/start", json={"target_score": 0})
    assert response.status_code == 422


def test_select_move_and_undo():
    start()
    api.game.load_position(api.game.board.occupancy(), turn=0, dice=(3, 1))

    moves = client.get("/moves").json()
    assert {"start": 7, "end": 4, "die": 3} in moves

    state = client.post("/select", json={"target": 7}).json()
    assert sorted(state["marks"]) == [4, 6]
    assert state["selected"] == 7
    assert state["destinations"] == [4, 6]

    state = client.post("/destination", json={"target": 4}).json()
    assert state["board"][4] == 1
    assert state["board"][7] == 2
    assert state["consumed"] == [True, False]

    state = client.post("/undo").json()
    assert state["board"][4] == 0
    assert state["board"][7] == 3
    assert state["consumed"] == [False, False]


def test_rejected_actions_report_errors():
    start()
    api.game.load_position(api.game.board.occupancy(), turn=0, dice=(3, 1))
    assert client.post("/roll").json() == {"error": "Not in Roll Phase"}
    assert "error" in client.post("/select", json={"target": 0}).json()
    assert "error" in client.post("/destination", json={"target": "off"}).json()
    assert "error" in client.post("/double/respond", json={"accept": True}).json()
    assert "error" in client.post("/ai-step").json()
    assert "error" in client.post("/end-turn").json()


def test_moves_empty_outside_move_phase():
    start()
    assert client.get("/moves").json() == []


def test_double_waits_for_human_answer():
    start(player2_is_ai=False)
    state = client.post("/double").json()
    assert state["phase"] == "RESPOND_TO_DOUBLE"
    assert state["pending_stake"] == 2
    assert state["affordances"]["respond"] is True

    state = client.post("/double/respond", json={"accept": False}).json()
    assert state["phase"] == "NOT_PLAYING"
    assert state["last_result"]["declined_double"] is True
    assert state["players"][0]["score"] == 1

    state = client.post("/next-round", json={"starting_player": 1}).json()
    assert state["phase"] == "ROLL_DICE"
    assert state["turn"] == 1


def test_ai_step_plays_a_turn():
    start(player1_is_ai=True, player2_is_ai=True)
    state = client.post("/ai-step").json()
    assert state["turn"] == 1
    assert state["phase"] == "ROLL_DICE"
    assert client.get("/gamestate").json()["turn"] == 1


def test_contract_violation_is_server_error(monkeypatch):
    start(player1_is_ai=True)

    def broken():
        raise ContractViolation("lost a piece")

    monkeypatch.setattr(api.game, "step_ai", broken)
    response = client.post("/ai-step")
    assert response.status_code == 500
    assert response.json()["detail"] == "lost a piece"
