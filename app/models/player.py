import json
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.engine.state import Player, PlayerStats


class PlayerRecord(Base):
    """A roster player shared across matches, with cumulative career stats"""
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), index=True)
    short_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_group_member: Mapped[bool] = mapped_column(default=False)

    stats_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON PlayerStats
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def stats(self) -> PlayerStats:
        if not self.stats_json:
            return PlayerStats()
        try:
            return PlayerStats.from_dict(json.loads(self.stats_json))
        except (json.JSONDecodeError, TypeError):
            return PlayerStats()

    def to_player(self) -> Player:
        return Player(
            id=self.id,
            name=self.name,
            short_id=self.short_id,
            photo_url=self.photo_url,
            is_group_member=self.is_group_member,
            stats=self.stats,
        )

    def __repr__(self):
        return f"<Player {self.name} ({self.id})>"
