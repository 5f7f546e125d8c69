"""
Tests for the innings state machine, boundary checks and the selection sub-flow.
"""
import pytest

from app.engine.errors import MatchStateError
from app.engine.innings import (
    check_boundaries, continue_to_second_innings, create_match, select_bowler, set_man_of_the_match, set_new_batsman,
)
from app.engine.rules import get_match_result, target
from app.engine.state import MatchPhase, TossDecision, WicketKind
from factories import bowl, fill_selections, make_match, make_player, make_squad, play, start_innings


def chase(first_innings_score: int, total_overs: int = 20):
    """Second innings ready to bowl, Tigers chasing first_innings_score"""
    match = make_match(total_overs=total_overs)
    match.phase = MatchPhase.INNINGS_BREAK
    match.batting_team.score = first_innings_score
    return start_innings(continue_to_second_innings(match))


class TestCreateMatch:
    def test_toss_winner_batting_first(self):
        match = create_match("Lions", "Tigers", 5, "Tigers", TossDecision.BAT)
        assert match.batting_team.name == "Tigers"
        assert match.phase == MatchPhase.FIRST_INNINGS

    def test_toss_winner_bowling_first(self):
        match = create_match("Lions", "Tigers", 5, "Tigers", TossDecision.BOWL)
        assert match.batting_team.name == "Lions"
        assert match.bowling_team.name == "Tigers"

    def test_rejects_zero_overs(self):
        with pytest.raises(ValueError):
            create_match("Lions", "Tigers", 0, "Lions", TossDecision.BAT)

    def test_rejects_unknown_toss_winner(self):
        with pytest.raises(ValueError):
            create_match("Lions", "Tigers", 5, "Bears", TossDecision.BAT)

    def test_rosters_are_copied(self):
        squad = make_squad("a", 3)
        match = create_match("Lions", "Tigers", 5, "Lions", TossDecision.BAT, team1_players=squad)
        squad.append(make_player("x"))
        assert len(match.team1.players) == 3


class TestStateMachine:
    def test_first_innings_ends_in_break(self, live_match):
        match = play(live_match, [1] * 12)
        assert match.phase == MatchPhase.INNINGS_BREAK
        assert not match.is_second_innings

    def test_no_scoring_during_break(self, live_match):
        match = play(live_match, [0] * 12)
        with pytest.raises(MatchStateError):
            bowl(match, 1)

    def test_continue_swaps_sides_and_resets(self, live_match):
        match = play(live_match, [1] * 12)
        second = continue_to_second_innings(match)

        assert second.phase == MatchPhase.SECOND_INNINGS
        assert second.first_innings_score == 12
        assert target(second) == 13
        assert second.batting_team.name == "Tigers"
        assert (second.batting_team.score, second.batting_team.overs, second.batting_team.wickets) == (0, 0, 0)
        assert second.bowling_team.score == 12
        assert second.current_striker is None
        assert second.current_non_striker is None
        assert second.current_bowler is None
        assert second.previous_bowler is None

    def test_continue_only_from_break(self, live_match):
        with pytest.raises(MatchStateError):
            continue_to_second_innings(live_match)

    def test_second_innings_tracks_its_own_overs(self, live_match):
        match = play(live_match, [0] * 12)
        match = start_innings(continue_to_second_innings(match))
        match = bowl(match, 1)

        assert match.innings_number == 2
        assert [b.over_number for b in match.innings_balls] == [1]
        assert match.balls[-1].innings == 2

    def test_completed_match_records_result(self, live_match):
        match = play(live_match, [1] * 12)
        match = start_innings(continue_to_second_innings(match))
        match = play(match, [0] * 12)

        assert match.phase == MatchPhase.COMPLETED
        assert match.is_completed
        assert match.end_time is not None
        assert match.winner == "Lions won by 12 runs"
        assert match.man_of_the_match is not None

    def test_no_scoring_after_completion(self):
        match = chase(0)
        match = bowl(match, 1)
        assert match.is_completed
        with pytest.raises(MatchStateError):
            bowl(match, 1)


class TestChase:
    def test_winning_boundary_ends_innings_immediately(self):
        """Needing 2 off 119/0, a four finishes the match mid-over"""
        match = chase(120)
        match.batting_team.score = 119
        match = bowl(match, 4)

        assert match.batting_team.score == 123
        assert match.batting_team.balls == 1
        assert match.is_completed
        assert match.winner == "Tigers won by 10 wickets"

    def test_level_score_does_not_end_innings(self):
        match = chase(120)
        match.batting_team.score = 119
        match = bowl(match, 1)
        assert match.batting_team.score == 120
        assert match.phase == MatchPhase.SECOND_INNINGS

        match = bowl(match, 1)
        assert match.is_completed
        assert get_match_result(match) == "Tigers won by 10 wickets"

    def test_tie(self):
        match = chase(6, total_overs=1)
        match = play(match, [1] * 6)
        assert match.is_completed
        assert match.winner == "Match tied"

    def test_defending_side_wins_by_runs(self):
        match = chase(10, total_overs=1)
        match = play(match, [0, 0, 0, 0, 0, 1])
        assert match.winner == "Lions won by 9 runs"

    def test_single_run_and_wicket_margins(self):
        match = chase(1, total_overs=1)
        match = play(match, [0] * 6)
        assert match.winner == "Lions won by 1 run"

        match = chase(0)
        for _ in range(9):
            match = fill_selections(match)
            match = bowl(match, 0, wicket=WicketKind.LBW)
        match = fill_selections(match)
        match = bowl(match, 1)
        assert match.winner == "Tigers won by 1 wicket"

    def test_result_in_progress(self, live_match):
        assert get_match_result(live_match) == "Match in progress"


class TestBoundaryStatus:
    def test_bowler_needed_before_first_ball(self, match):
        assert check_boundaries(match).needs_bowler

    def test_over_complete_requests_new_bowler(self, live_match):
        match = play(live_match, [0] * 6)
        status = check_boundaries(match)
        assert status.over_complete
        assert status.needs_bowler
        assert not status.needs_batsman

        match = select_bowler(match, match.bowling_team.players[1])
        status = check_boundaries(match)
        assert status.over_complete
        assert not status.needs_bowler

    def test_wicket_requests_new_batsman(self, live_match):
        match = bowl(live_match, 0, wicket=WicketKind.BOWLED)
        assert check_boundaries(match).needs_batsman

        match = set_new_batsman(match, match.batting_team.players[2])
        assert not check_boundaries(match).needs_batsman
        assert match.current_striker.id == "a3"
        assert match.current_non_striker.id == "a2"

    def test_innings_break_reports_completion(self, live_match):
        match = play(live_match, [0] * 12)
        status = check_boundaries(match)
        assert status.innings_complete
        assert not status.match_complete
        assert not status.needs_bowler


class TestSelection:
    def test_new_batsman_takes_the_dismissed_end(self, live_match):
        """A run out at the non-striker's end is replaced at that end"""
        runner = live_match.current_non_striker
        fielder = live_match.bowling_team.players[3]
        match = bowl(live_match, 0, wicket=WicketKind.RUN_OUT, dismissed=runner, fielder=fielder)
        assert match.balls[-1].dismissed_id == "a2"

        match = set_new_batsman(match, match.batting_team.players[2])
        assert match.current_striker.id == "a1"
        assert match.current_non_striker.id == "a3"

    def test_wicket_off_last_ball_of_over(self, live_match):
        match = play(live_match, [0] * 5)
        match = bowl(match, 0, wicket=WicketKind.BOWLED)
        # a1 was bowled and the end-of-over swap moved that slot to the non-striker
        assert match.current_non_striker.id == "a1"

        match = set_new_batsman(match, match.batting_team.players[2])
        assert match.current_striker.id == "a2"
        assert match.current_non_striker.id == "a3"

    def test_new_batsman_requires_a_wicket(self, live_match):
        with pytest.raises(MatchStateError):
            set_new_batsman(live_match, live_match.batting_team.players[2])

    def test_select_bowler_tracks_previous(self, live_match):
        match = play(live_match, [0] * 6)
        match = select_bowler(match, match.bowling_team.players[1])
        assert match.current_bowler.id == "b2"
        assert match.previous_bowler.id == "b1"

    def test_select_bowler_adds_guest_to_roster(self, live_match):
        guest = make_player("guest")
        match = play(live_match, [0] * 6)
        match = select_bowler(match, guest)
        assert match.bowling_team.find_player("guest") is not None


class TestManOfTheMatch:
    def completed(self, live_match):
        match = play(live_match, [1] * 12)
        match = start_innings(continue_to_second_innings(match))
        return play(match, [0] * 12)

    def test_keeping_the_computed_pick(self, live_match):
        match = self.completed(live_match)
        computed = match.man_of_the_match

        confirmed = set_man_of_the_match(match)
        assert confirmed.man_of_the_match == computed
        assert confirmed.man_of_the_match_confirmed
        assert not match.man_of_the_match_confirmed

    def test_scorer_override(self, live_match):
        match = self.completed(live_match)
        confirmed = set_man_of_the_match(match, make_player("b7"))
        assert confirmed.man_of_the_match.id == "b7"
        assert confirmed.man_of_the_match.name == "Player b7"

    def test_only_once(self, live_match):
        match = set_man_of_the_match(self.completed(live_match))
        with pytest.raises(MatchStateError):
            set_man_of_the_match(match, make_player("a3"))

    def test_not_before_completion(self, live_match):
        with pytest.raises(MatchStateError):
            set_man_of_the_match(live_match, make_player("a1"))

    def test_player_must_be_on_a_roster(self, live_match):
        match = self.completed(live_match)
        with pytest.raises(MatchStateError):
            set_man_of_the_match(match, make_player("x1", "Outsider"))
