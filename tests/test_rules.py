"""
Tests for the rules engine: scoring, over counting, strike rotation, bowler rotation and undo.
"""
import copy
import pytest

from app.engine.errors import MatchStateError
from app.engine.rules import (
    can_bowler_bowl_next_over, get_available_batsmen, get_available_bowlers, is_innings_complete,
    is_over_complete, should_rotate_strike, undo_last_ball,
)
from app.engine.scorecard import replay_innings
from app.engine.state import MatchPhase, WicketKind
from factories import bowl, fill_selections, make_match, play, start_innings


class TestScoreConservation:
    """Team score always equals the sum of the ball log's run values"""

    def test_mixed_deliveries(self, live_match):
        match = live_match
        match = bowl(match, 1)
        match = bowl(match, 4, extra="bye")
        match = bowl(match, 1, extra="wide")
        match = bowl(match, 3, extra="no_ball")
        match = bowl(match, 1, extra="leg_bye")
        match = bowl(match, 6)
        match = bowl(match, 0)

        team = match.batting_team
        assert team.score == sum(b.runs for b in match.balls) == 16
        assert team.extras.wides == 1
        assert team.extras.no_balls == 1
        assert team.extras.byes == 4
        assert team.extras.leg_byes == 1
        assert team.extras.total == 7

    def test_replay_matches_live_counters(self, live_match):
        match = play(live_match, [1, 2, 0, 4, 6, 1, 0, 3])
        match = bowl(match, 2, extra="wide")

        replayed = replay_innings(match.batting_team.name, match.innings_balls)
        team = match.batting_team
        assert (replayed.score, replayed.wickets, replayed.overs, replayed.balls) == \
            (team.score, team.wickets, team.overs, team.balls)
        assert replayed.extras == team.extras

    def test_process_ball_leaves_input_untouched(self, live_match):
        before = copy.deepcopy(live_match)
        bowl(live_match, 4)
        assert live_match == before


class TestBallCounting:
    def test_six_legal_balls_complete_an_over(self, live_match):
        match = play(live_match, [0] * 5)
        assert (match.batting_team.overs, match.batting_team.balls) == (0, 5)

        match = bowl(match, 0)
        assert (match.batting_team.overs, match.batting_team.balls) == (1, 0)
        assert match.batting_team.overs_display == "1.0"

    def test_wides_and_no_balls_do_not_count(self, live_match):
        match = bowl(live_match, 1, extra="wide")
        match = bowl(match, 1, extra="no_ball")
        assert match.batting_team.balls == 0
        assert match.batting_team.legal_balls == 0

    def test_byes_and_leg_byes_count(self, live_match):
        match = bowl(live_match, 1, extra="bye")
        match = bowl(match, 2, extra="leg_bye")
        assert match.batting_team.balls == 2

    def test_extras_share_the_next_ball_slot(self, live_match):
        match = bowl(live_match, 1, extra="wide")
        match = bowl(match, 0)
        assert [b.ball_number for b in match.balls] == [1, 1]

    def test_is_over_complete_counts_only_legal_deliveries(self, live_match):
        match = play(live_match, [0] * 5)
        match = bowl(match, 1, extra="wide")
        match = bowl(match, 1, extra="no_ball")
        assert is_over_complete(match) is False


class TestStrikeRotation:
    def test_odd_runs_rotate(self, live_match):
        match = bowl(live_match, 1)
        assert match.current_striker.id == "a2"
        assert match.current_non_striker.id == "a1"

        match = bowl(match, 3)
        assert match.current_striker.id == "a1"

    def test_even_runs_keep_strike(self, live_match):
        match = bowl(live_match, 2)
        match = bowl(match, 4)
        assert match.current_striker.id == "a1"

    def test_end_of_over_always_rotates(self, live_match):
        match = play(live_match, [0] * 6)
        assert match.current_striker.id == "a2"

    def test_single_off_the_last_ball_rotates_once(self, live_match):
        match = play(live_match, [0, 0, 0, 0, 0, 1])
        assert match.current_striker.id == "a2"

    def test_bare_wide_does_not_rotate(self, live_match):
        match = bowl(live_match, 1, extra="wide")
        assert match.current_striker.id == "a1"

    def test_no_ball_with_runs_rotates(self, live_match):
        match = bowl(live_match, 2, extra="no_ball")
        assert match.current_striker.id == "a2"

    def test_should_rotate_strike_table(self, live_match):
        match = bowl(live_match, 1, extra="wide")
        wide = match.balls[-1]
        assert should_rotate_strike(wide, over_completed=False) is False
        match = bowl(match, 2)
        two = match.balls[-1]
        assert should_rotate_strike(two, over_completed=False) is False
        assert should_rotate_strike(two, over_completed=True) is True


class TestScenarios:
    def test_two_over_innings_of_singles_then_dots(self, live_match):
        """Six singles then a maiden: 6 runs, 2.0 overs, the opening non-striker on strike"""
        match = play(live_match, [1] * 6 + [0] * 6)

        assert match.batting_team.score == 6
        assert match.batting_team.overs_display == "2.0"
        assert match.current_striker.id == "a2"
        assert match.current_non_striker.id == "a1"
        assert match.phase == MatchPhase.INNINGS_BREAK

        over_one = {b.bowler_id for b in match.balls if b.over_number == 1}
        over_two = {b.bowler_id for b in match.balls if b.over_number == 2}
        assert over_one.isdisjoint(over_two)

    def test_wide_with_overthrows(self, live_match):
        """A wide worth 5 adds 5, one wide, no ball counted, and rotates strike"""
        match = bowl(live_match, 5, extra="wide")

        assert match.batting_team.score == 5
        assert match.batting_team.extras.wides == 1
        assert match.batting_team.balls == 0
        assert match.current_striker.id == "a2"

    def test_bowler_of_over_three_sits_out_over_four_only(self):
        match = start_innings(make_match(total_overs=5))
        match = play(match, [0] * 18)
        over_three = {b.bowler_id for b in match.balls if b.over_number == 3}
        assert over_three == {"b1"}

        assert "b1" not in [p.id for p in get_available_bowlers(match, 4)]
        assert not can_bowler_bowl_next_over(match.bowling_team.players[0], match)

        match = play(match, [0] * 6)
        assert "b1" in [p.id for p in get_available_bowlers(match, 5)]
        assert can_bowler_bowl_next_over(match.bowling_team.players[0], match)


class TestBowlerRotation:
    def test_first_over_has_no_restriction(self, match):
        assert [p.id for p in get_available_bowlers(match, 1)] == [f"b{i}" for i in range(1, 12)]

    def test_no_bowler_bowls_consecutive_overs(self):
        match = start_innings(make_match(total_overs=5))
        match = play(match, [1, 0, 2, 0, 0, 1] * 5)

        bowlers = [
            {b.bowler_id for b in match.balls if b.over_number == n}
            for n in range(1, 6)
        ]
        for previous, current in zip(bowlers, bowlers[1:]):
            assert previous.isdisjoint(current)

    def test_available_bowlers_keep_roster_order(self, live_match):
        match = play(live_match, [0] * 6)
        available = [p.id for p in get_available_bowlers(match, 2)]
        assert available == [f"b{i}" for i in range(2, 12)]


class TestAvailableBatsmen:
    def test_excludes_active_and_dismissed(self, live_match):
        match = bowl(live_match, 0, wicket=WicketKind.BOWLED)
        available = [p.id for p in get_available_batsmen(match)]
        assert "a1" not in available
        assert "a2" not in available
        assert available[0] == "a3"


class TestInningsComplete:
    def test_overs_exhausted(self, live_match):
        match = play(live_match, [0] * 11)
        assert not is_innings_complete(match)
        match = play(match, [0])
        assert match.phase == MatchPhase.INNINGS_BREAK

    def test_all_out(self):
        match = start_innings(make_match(total_overs=20))
        for _ in range(10):
            match = fill_selections(match)
            match = bowl(match, 0, wicket=WicketKind.BOWLED)

        assert match.batting_team.wickets == 10
        assert match.batting_team.overs_display == "1.4"
        assert match.phase == MatchPhase.INNINGS_BREAK


class TestUndo:
    def test_undo_restores_previous_match(self, live_match):
        match = play(live_match, [1, 2])
        after = bowl(match, 3)
        assert undo_last_ball(after) == match

    def test_undo_wicket(self, live_match):
        after = bowl(live_match, 0, wicket=WicketKind.BOWLED)
        restored = undo_last_ball(after)
        assert restored == live_match
        assert restored.batting_team.wickets == 0

    def test_undo_extras(self, live_match):
        after = bowl(live_match, 5, extra="wide")
        assert undo_last_ball(after) == live_match

        after = bowl(live_match, 3, extra="leg_bye")
        assert undo_last_ball(after) == live_match

    def test_undo_after_new_bowler_hands_the_over_back(self, live_match):
        five = play(live_match, [0] * 5)
        six = play(five, [0])
        next_over = fill_selections(six)
        assert next_over.current_bowler.id == "b2"
        assert next_over.previous_bowler.id == "b1"

        restored = undo_last_ball(next_over)
        assert restored == five
        assert restored.current_bowler.id == "b1"
        assert restored.previous_bowler is None

    def test_undo_without_deliveries(self, live_match):
        with pytest.raises(MatchStateError):
            undo_last_ball(live_match)

    def test_undo_not_allowed_at_innings_break(self, live_match):
        match = play(live_match, [0] * 12)
        assert match.phase == MatchPhase.INNINGS_BREAK
        with pytest.raises(MatchStateError):
            undo_last_ball(match)
