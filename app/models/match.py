import json
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Text, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.engine.state import Match


class MatchRecord(Base):
    """Latest snapshot of a match; the engine's Match is rebuilt from snapshot_json"""
    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    team1_name: Mapped[str] = mapped_column(String(100))
    team2_name: Mapped[str] = mapped_column(String(100))
    phase: Mapped[str] = mapped_column(String(20))
    is_completed: Mapped[bool] = mapped_column(default=False, index=True)
    winner: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    snapshot_json: Mapped[str] = mapped_column(Text)

    start_time: Mapped[datetime] = mapped_column(DateTime, index=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    revision: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_match(self) -> Match:
        return Match.from_dict(json.loads(self.snapshot_json))

    def __repr__(self):
        return f"<Match {self.team1_name} vs {self.team2_name} ({self.phase})>"
