from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Optional, Union

from .errors import ContractViolation
from .game import BackgammonGame, GamePhase
from .movement import Movement
from .settings import GameSettings

app = FastAPI()

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # Allow all for dev
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global State (MVP: Single Session)
game = BackgammonGame()


# Models
class SelectRequest(BaseModel):
    target: Union[int, str] # Point index, 'bar' or 'off'


class DoubleResponse(BaseModel):
    accept: bool


class NextRoundRequest(BaseModel):
    starting_player: Optional[int] = None


def movement_dict(m: Movement):
    return {"start": m.start, "end": m.end, "die": m.die}


def get_state_dict():
    # Convert numpy/enums to JSON friendly
    return {
        "board": game.board.occupancy().tolist(),
        "marks": game.board.marked(),
        "selected": game.board.selected,
        "destinations": game.destinations(),
        "bar": game.board.bar,
        "off": game.board.off,
        "turn": game.turn,
        "dice": list(game.dice.values),
        "consumed": game.dice.consumed[:game.dice.available_slot_count()],
        "phase": game.phase.name,
        "players": [
            {
                "name": p.name,
                "piece": p.piece.value,
                "direction": p.direction,
                "score": p.score,
                "double_points": p.double_points,
                "ai": p.ai,
            }
            for p in game.players
        ],
        "pips": [int(x) for x in game.get_pip_counts()],
        "pending_stake": game.pending_stake,
        "can_double": game.can_double(),
        "affordances": vars(game.affordances),
        "last_result": vars(game.last_result) if game.last_result else None,
        "match_over": game.match_over,
        "history": game.history,
    }


def _result(changed: bool, error: str):
    if not changed:
        return {"error": error}
    return get_state_dict()


def _guarded(action):
    try:
        return action()
    except ContractViolation as e:
        print(f"Internal Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/")
def read_root():
    return {"status": "ok", "message": "Backgammon Rules Engine API"}


@app.post("/start")
def start_game(req: Optional[GameSettings] = None):
    game.start_new_game(req or GameSettings())
    print(f"Start Game Requested: {game.players[0].name} vs {game.players[1].name} "
          f"(target {game.settings.target_score})")
    return get_state_dict()


@app.post("/next-round")
def next_round(req: Optional[NextRoundRequest] = None):
    starting_player = req.starting_player if req else None
    return _result(game.new_round(starting_player), "Round in progress or match over")


@app.get("/gamestate")
def get_gamestate():
    return get_state_dict()


@app.post("/roll")
def roll_dice():
    return _result(game.roll_dice(), "Not in Roll Phase")


@app.get("/moves")
def get_legal_moves():
    """Returns list of atomic legal moves for the current dice."""
    if game.phase == GamePhase.MOVE_PIECES:
        return [movement_dict(m) for m in game.movements]
    return []


@app.post("/select")
def select_source(req: SelectRequest):
    return _result(game.select_source(req.target), "Nothing to move from there")


@app.post("/destination")
def select_destination(req: SelectRequest):
    return _result(_guarded(lambda: game.select_destination(req.target)), "Not a legal destination")


@app.post("/end-turn")
def end_turn():
    return _result(game.confirm_end_turn(), "Turn is not over")


@app.post("/double")
def request_double():
    return _result(_guarded(game.request_double), "Cannot double now")


@app.post("/double/respond")
def respond_double(req: DoubleResponse):
    return _result(game.respond_double(req.accept), "No double pending")


@app.post("/undo")
def undo_turn():
    return _result(game.undo_turn(), "Nothing to undo")


@app.post("/ai-step")
def play_ai_step():
    return _result(_guarded(game.step_ai), "Not an AI turn")
