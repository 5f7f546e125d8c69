"""
Tests for the match data model, delivery construction and snapshots.
"""
import json
import pytest

from app.engine.deliveries import build_delivery, generate_commentary
from app.engine.errors import MatchStateError
from app.engine.state import Ball, Match, PlayerStats, BowlingFigures, WicketKind
from factories import bowl, make_player, play


class TestBall:
    def test_runs_off_bat(self):
        common = dict(id="x", innings=1, over_number=1, ball_number=1, runs=3,
                      striker_id="a1", non_striker_id="a2", bowler_id="b1")
        assert Ball(**common).runs_off_bat == 3
        assert Ball(**common, is_bye=True).runs_off_bat == 0
        assert Ball(**common, is_no_ball=True).runs_off_bat == 0

    def test_run_out_not_credited_to_bowler(self):
        ball = Ball(id="x", innings=1, over_number=1, ball_number=1, runs=0, striker_id="a1",
                    non_striker_id="a2", bowler_id="b1", is_wicket=True, wicket_kind="run_out")
        assert ball.wicket_kind == WicketKind.RUN_OUT
        assert not ball.credited_to_bowler


class TestBuildDelivery:
    def test_requires_selections(self, match):
        with pytest.raises(MatchStateError):
            build_delivery(match, runs=1)

    def test_stamps_position_and_players(self, live_match):
        match = play(live_match, [0] * 6)
        match = play(match, [1, 2])
        ball = build_delivery(match, runs=4)

        assert (ball.innings, ball.over_number, ball.ball_number) == (1, 2, 3)
        assert ball.bowler_id == "b2"
        assert ball.striker_id == match.current_striker.id
        assert ball.commentary == "Four!"

    def test_wicket_commentary(self, live_match):
        fielder = live_match.bowling_team.find_player("b6")
        ball = build_delivery(live_match, wicket_kind=WicketKind.CAUGHT, fielder=fielder)
        assert ball.is_wicket
        assert ball.dismissed_id == "a1"
        assert ball.commentary == "Player a1 caught by Player b6 for 0"

    def test_extras_commentary(self):
        assert generate_commentary(0) == "Dot ball"
        assert generate_commentary(1) == "Single"
        assert generate_commentary(5) == "5 runs"
        assert generate_commentary(5, is_wide=True) == "Wide, 5 runs"
        assert generate_commentary(1, is_bye=True) == "1 bye"
        assert generate_commentary(2, is_leg_bye=True) == "2 leg byes"


class TestMatchSnapshot:
    def test_round_trip_through_json(self, live_match):
        match = play(live_match, [1, 4, 0, 2, 0, 6, 1])
        match = bowl(match, 0, wicket=WicketKind.BOWLED)

        restored = Match.from_dict(json.loads(json.dumps(match.to_dict())))
        assert restored == match
        assert restored.current_bowler is restored.bowling_team.find_player("b2")

    def test_player_stats_round_trip(self):
        stats = PlayerStats(runs_scored=120, times_out=4, best_bowling=BowlingFigures(3, 18), stumpings=2)
        assert PlayerStats.from_dict(stats.to_dict()) == stats
        assert PlayerStats.from_dict(None) == PlayerStats()

    def test_all_players_team1_first_without_duplicates(self, match):
        match.team2.players.append(make_player("a1"))
        ids = [p.id for p in match.all_players]
        assert ids[:11] == [f"a{i}" for i in range(1, 12)]
        assert ids.count("a1") == 1
