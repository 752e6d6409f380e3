from pydantic import BaseModel, Field

from .player import PieceColor


class GameSettings(BaseModel):
    """Everything the UI passes in when starting a new match."""
    target_score: int = Field(default=15, ge=1)
    player1_name: str = "Human"
    player2_name: str = "AI"
    player1_is_ai: bool = False
    player2_is_ai: bool = True
    player1_clockwise: bool = True  # Clockwise = moves from 23 down to 0
    player1_piece_color: PieceColor = PieceColor.BLACK

    @property
    def directions(self):
        return (-1, 1) if self.player1_clockwise else (1, -1)

    @property
    def colors(self):
        return (self.player1_piece_color, self.player1_piece_color.other)
