import argparse
import random
from typing import Optional

from tqdm import tqdm

from .game import BackgammonGame, GamePhase
from .settings import GameSettings

MAX_STEPS = 100_000


def play_match(settings: Optional[GameSettings] = None, rng: Optional[random.Random] = None,
               check: bool = True) -> BackgammonGame:
    """
    Plays a full AI-vs-AI match (first to settings.target_score).
    With `check`, piece conservation and cube invariants are verified after every step.
    """
    settings = settings or GameSettings(target_score=5)
    settings = settings.model_copy(update={"player1_is_ai": True, "player2_is_ai": True})

    game = BackgammonGame(rng=rng)
    game.start_new_game(settings)

    steps = 0
    while not game.match_over:
        if game.phase == GamePhase.NOT_PLAYING:
            game.new_round()
        else:
            game.step_ai()
        if check:
            game.check_invariants()
        steps += 1
        if steps > MAX_STEPS:
            raise RuntimeError(f"Match did not finish after {MAX_STEPS} steps")
    return game


def run_series(n_matches: int, target: int = 5, seed: Optional[int] = None):
    """Plays `n_matches` matches and returns [wins player 1, wins player 2]."""
    rng = random.Random(seed)
    settings = GameSettings(target_score=target, player1_name="AI-1", player2_name="AI-2")
    wins = [0, 0]
    gammons = 0
    for _ in tqdm(range(n_matches), desc="Matches"):
        game = play_match(settings, rng=rng)
        winner = 0 if game.players[0].score > game.players[1].score else 1
        wins[winner] += 1
        if game.last_result and game.last_result.win_type > 1:
            gammons += 1

    print(f"AI-1: {wins[0]} | AI-2: {wins[1]} | Matches ending on a gammon or better: {gammons}")
    return wins


def main():
    parser = argparse.ArgumentParser(description="Random AI vs random AI")
    parser.add_argument("--matches", type=int, default=20)
    parser.add_argument("--target", type=int, default=5)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()
    run_series(args.matches, target=args.target, seed=args.seed)


if __name__ == "__main__":
    main()
