"""
Roster API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.engine.state import Player
from app.engine.stats import batting_average, strike_rate, bowling_average, economy_rate
from app.store import PlayerStore
from app.api.schemas import LeaderboardEnum, PlayerCreate, PlayerResponse, PlayerStatsResponse

router = APIRouter(prefix="/players", tags=["Players"])


def player_response(player: Player) -> PlayerResponse:
    stats = player.stats
    stats_dict = stats.to_dict()
    stats_dict["best_bowling"] = str(stats.best_bowling) if stats.best_bowling else None
    return PlayerResponse(
        id=player.id,
        name=player.name,
        short_id=player.short_id,
        photo_url=player.photo_url,
        is_group_member=player.is_group_member,
        stats=PlayerStatsResponse(
            **stats_dict,
            batting_average=batting_average(stats),
            strike_rate=strike_rate(stats),
            bowling_average=bowling_average(stats),
            economy_rate=economy_rate(stats),
        ),
    )


@router.post("", response_model=PlayerResponse, status_code=201)
def create_player(request: PlayerCreate, db: Session = Depends(get_db)):
    """Add a player to the roster"""
    player = PlayerStore(db).add(
        name=request.name.strip(),
        short_id=request.short_id,
        photo_url=request.photo_url,
        is_group_member=request.is_group_member,
    )
    return player_response(player)


@router.get("", response_model=List[PlayerResponse])
def list_players(q: Optional[str] = None, db: Session = Depends(get_db)):
    """List the roster, optionally filtered by name or short id"""
    store = PlayerStore(db)
    players = store.search(q) if q else store.list()
    return [player_response(p) for p in players]


@router.get("/leaderboard", response_model=List[PlayerResponse])
def get_leaderboard(stat: LeaderboardEnum = LeaderboardEnum.RUNS, limit: int = Query(10, ge=1, le=50),
                    db: Session = Depends(get_db)):
    """Top players by runs, wickets, batting average or Man of the Match awards"""
    return [player_response(p) for p in PlayerStore(db).leaderboard(stat.value, limit)]


@router.get("/{player_id}", response_model=PlayerResponse)
def get_player(player_id: str, db: Session = Depends(get_db)):
    player = PlayerStore(db).get(player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player_response(player)
