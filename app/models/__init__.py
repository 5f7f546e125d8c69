from app.models.player import PlayerRecord
from app.models.match import MatchRecord

__all__ = [
    "PlayerRecord",
    "MatchRecord",
]
