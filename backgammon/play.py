import argparse
import time

from .game import BackgammonGame, GameEvent, GamePhase
from .player import HumanStrategy
from .settings import GameSettings

HELP = "Commands: [r] Roll, [d] Double, [m SRC DST] Move (bar/off allowed), [e] End turn, [u] Undo, [q] Quit"


def parse_target(token: str):
    token = token.strip().lower()
    if token in ('bar', 'off'):
        return token
    return int(token)


def ask_yes_no(question: str) -> bool:
    return input(f"{question} [y/n]: ").strip().lower().startswith('y')


def human_command(game: BackgammonGame, line: str) -> bool:
    """Runs one console command. Returns False to quit."""
    parts = line.split()
    if not parts:
        return True
    cmd = parts[0].lower()

    if cmd == 'q':
        return False
    if cmd == 'r':
        ok = game.roll_dice()
    elif cmd == 'd':
        ok = game.request_double()
    elif cmd == 'e':
        ok = game.confirm_end_turn()
    elif cmd == 'u':
        ok = game.undo_turn()
    elif cmd == 'm' and len(parts) == 3:
        try:
            src, dst = parse_target(parts[1]), parse_target(parts[2])
        except ValueError:
            ok = False
        else:
            ok = game.select_source(src) and game.select_destination(dst)
    else:
        ok = False

    if not ok:
        print(HELP)
    return True


def main():
    parser = argparse.ArgumentParser(description="Play Backgammon against the random AI")
    parser.add_argument("--name", default="Human")
    parser.add_argument("--target", type=int, default=15)
    parser.add_argument("--delay", type=float, default=0.5, help="Pause (s) after each AI turn")
    args = parser.parse_args()

    print("Welcome to Backgammon!")
    settings = GameSettings(target_score=args.target, player1_name=args.name)
    game = BackgammonGame()
    game.subscribe(GameEvent.ROUND_ENDED, lambda result: print(
        f"\n{game.players[result.winner].name} wins a {result.win_name} for {result.points} points"))
    game.start_new_game(settings, strategies=[HumanStrategy(prompt=ask_yes_no), None])

    while True:
        print("\n" + "=" * 20)
        print(game.render_ascii())

        if game.phase == GamePhase.NOT_PLAYING:
            if game.match_over:
                print(f"Match Over! {game.players[0].score} - {game.players[1].score}")
                break
            input("Press Enter for the next round.")
            game.new_round()
            continue

        if game.awaiting_ai:
            print("\nAI Thinking...")
            game.step_ai()
            print(game.history[-1])
            time.sleep(args.delay)
            continue

        if game.phase == GamePhase.MOVE_PIECES:
            moves = ", ".join(str(m) for m in game.movements)
            print(f"Legal moves: {moves}")
        if not human_command(game, input("Choice: ")):
            break


if __name__ == "__main__":
    main()
