"""
Persistence for players and match snapshots.

Saving is best-effort: the in-memory Match is authoritative, so a failed
save is logged and retried, never surfaced to the scorer.
"""
import json
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt, wait_incrementing

from app.config import settings
from app.engine.state import Match, Player, PlayerStats, new_id
from app.engine.stats import leaderboard, update_player_stats
from app.models.match import MatchRecord
from app.models.player import PlayerRecord

logger = logging.getLogger(__name__)


class PlayerStore:
    """Roster provider backed by the players table"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, player_id: str) -> Optional[Player]:
        record = self.db.get(PlayerRecord, player_id)
        return record.to_player() if record else None

    def list(self) -> List[Player]:
        records = self.db.query(PlayerRecord).order_by(PlayerRecord.name).all()
        return [r.to_player() for r in records]

    def search(self, query: str) -> List[Player]:
        pattern = f"%{query.lower()}%"
        records = (
            self.db.query(PlayerRecord)
            .filter(or_(PlayerRecord.name.ilike(pattern), PlayerRecord.short_id.ilike(pattern)))
            .order_by(PlayerRecord.name)
            .all()
        )
        return [r.to_player() for r in records]

    def leaderboard(self, stat: str, limit: int = 10) -> List[Player]:
        """Ranked in Python since the stats live in a JSON column"""
        return leaderboard(self.list(), stat, limit)

    def add(
        self,
        name: str,
        short_id: Optional[str] = None,
        photo_url: Optional[str] = None,
        is_group_member: bool = False,
    ) -> Player:
        record = PlayerRecord(
            id=new_id("player"),
            name=name,
            short_id=short_id,
            photo_url=photo_url,
            is_group_member=is_group_member,
            stats_json=json.dumps(PlayerStats().to_dict()),
        )
        self.db.add(record)
        self.db.commit()
        return record.to_player()

    def save_stats(self, player_id: str, stats: PlayerStats):
        record = self.db.get(PlayerRecord, player_id)
        if record is None:
            raise LookupError(f"Player {player_id} not found")
        record.stats_json = json.dumps(stats.to_dict())
        self.db.commit()


class MatchStore:
    def __init__(self, db: Session):
        self.db = db

    def save(self, match: Match) -> bool:
        """Write the snapshot unless a newer revision is already stored"""
        record = self.db.get(MatchRecord, match.id)
        if record is None:
            record = MatchRecord(id=match.id, start_time=match.start_time)
            self.db.add(record)
        elif record.revision > match.revision:
            logger.info(
                "Skipping stale snapshot of match %s (revision %d, stored %d)",
                match.id, match.revision, record.revision,
            )
            return False

        record.team1_name = match.team1.name
        record.team2_name = match.team2.name
        record.phase = match.phase.value
        record.is_completed = match.is_completed
        record.winner = match.winner
        record.end_time = match.end_time
        record.revision = match.revision
        record.snapshot_json = json.dumps(match.to_dict())
        self.db.commit()
        return True

    def get(self, match_id: str) -> Optional[Match]:
        record = self.db.get(MatchRecord, match_id)
        return record.to_match() if record else None

    def list(self, completed: Optional[bool] = None) -> List[MatchRecord]:
        query = self.db.query(MatchRecord)
        if completed is not None:
            query = query.filter(MatchRecord.is_completed == completed)
        return query.order_by(MatchRecord.start_time.desc()).all()


def _save_retry(description: str):
    """Retry decorator for database writes, read from settings at call time"""
    backoff = settings.SAVE_RETRY_BACKOFF_SECONDS
    attempts = max(1, settings.SAVE_RETRY_ATTEMPTS)

    def log_failure(retry_state):
        logger.warning(
            "%s failed (attempt %d/%d): %s",
            description, retry_state.attempt_number, attempts, retry_state.outcome.exception(),
        )

    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_incrementing(start=backoff, increment=backoff),
        retry=retry_if_exception_type(SQLAlchemyError),
        before_sleep=log_failure,
    )


def _gave_up(description: str, error: RetryError) -> bool:
    last = error.last_attempt
    logger.error("%s gave up after %d attempts: %s", description, last.attempt_number, last.exception())
    return False


def persist_match_snapshot(match: Match, session_factory) -> bool:
    """Background task: write the latest snapshot in a session of its own"""
    description = f"Saving match {match.id}"

    @_save_retry(description)
    def save():
        db = session_factory()
        try:
            MatchStore(db).save(match)
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    try:
        save()
    except RetryError as e:
        return _gave_up(description, e)
    return True


def commit_player_stats(match: Match, session_factory) -> int:
    """
    Background task: add a completed match to every roster player's career stats.
    Returns how many roster players were processed.
    """
    updated = 0
    for player in match.all_players:
        description = f"Updating stats for {player.name}"

        @_save_retry(description)
        def save(player=player):
            db = session_factory()
            try:
                players = PlayerStore(db)
                stored = players.get(player.id)
                if stored is None:
                    logger.info("Player %s is not on the roster, stats not committed", player.name)
                    return
                players.save_stats(player.id, update_player_stats(stored, match))
            except SQLAlchemyError:
                db.rollback()
                raise
            finally:
                db.close()

        try:
            save()
        except RetryError as e:
            _gave_up(description, e)
            continue
        updated += 1
    logger.info("Player stats processed for match %s (%d players)", match.id, updated)
    return updated
