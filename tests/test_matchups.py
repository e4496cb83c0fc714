"""
Tests for head-to-head matchup scoring.
"""
import pytest

from sixers.errors import NotFoundError
from sixers.models.fantasy import FantasyMatchup
from sixers.models.match import WicketType
from sixers.engine.ball_events import BallEventProcessor
from sixers.engine.lifecycle import MatchLifecycleManager
from sixers.engine.matchups import MatchupAggregator, MatchupState


def player_line(side, player):
    return next(line for line in side.players if line.player_id == player.id)


class TestMatchupScore:

    def test_upcoming_before_any_match_starts(self, test_db, fantasy, match):
        result = MatchupAggregator(test_db).compute_matchup_score(fantasy.matchup.id)
        assert result.state == MatchupState.UPCOMING
        assert not result.is_valid
        assert result.score1 == 0
        assert result.score2 == 0

    def test_live_match_in_progress(self, test_db, world, fantasy, live_match, delivery):
        processor = BallEventProcessor(test_db)
        processor.add_event(live_match.id, world.tournament.id, delivery(live_match, runs_scored=4, four=True))

        result = MatchupAggregator(test_db).compute_matchup_score(fantasy.matchup.id)
        assert result.state == MatchupState.IN_PROGRESS
        assert result.is_valid

        # h_bat is team 1's captain: (4 runs + 1 four + SR 400 band 6) x 2
        captain = player_line(result.side1, world.p["h_bat"])
        assert captain.is_captain
        assert captain.score.base_points == 11
        assert captain.points == 22

        # a_bowl is vice captain: economy 24 is past (9,) for -6, x1.5
        vice = player_line(result.side1, world.p["a_bowl"])
        assert vice.points == pytest.approx(-9)

        # h_bowl on team 2 has not bowled
        assert player_line(result.side2, world.p["h_bowl"]).points == 0
        assert result.score1 == pytest.approx(13)

    def test_bench_players_never_score(self, test_db, world, fantasy, live_match, delivery):
        BallEventProcessor(test_db).add_event(
            live_match.id, world.tournament.id,
            delivery(
                live_match,
                striker_id=world.p["h_bat2"].id,
                non_striker_id=world.p["h_bat"].id,
                runs_scored=6, six=True,
            ),
        )
        result = MatchupAggregator(test_db).compute_matchup_score(fantasy.matchup.id)
        assert world.p["h_bat2"].id not in [line.player_id for line in result.side1.players]

    def test_complete_after_match_finishes(self, test_db, world, fantasy, live_match, delivery):
        BallEventProcessor(test_db).add_event(
            live_match.id, world.tournament.id,
            delivery(
                live_match,
                wicket_taken=world.p["h_bat"].id,
                wicket_type=WicketType.CATCH,
                fielder_id=world.p["a_wk"].id,
            ),
        )
        MatchLifecycleManager(test_db).finish_match(live_match.id, world.tournament.id)

        result = MatchupAggregator(test_db).compute_matchup_score(fantasy.matchup.id)
        assert result.state == MatchupState.COMPLETE
        # a_wk on team 2 took the catch
        assert player_line(result.side2, world.p["a_wk"]).score.breakdown["Points per catch"] == 8

    def test_scores_are_recomputed_on_read(self, test_db, world, fantasy, live_match, delivery):
        aggregator = MatchupAggregator(test_db)
        before = aggregator.compute_matchup_score(fantasy.matchup.id).score1

        BallEventProcessor(test_db).add_event(
            live_match.id, world.tournament.id, delivery(live_match, runs_scored=2),
        )
        after = MatchupAggregator(test_db).compute_matchup_score(fantasy.matchup.id).score1
        assert after != before

    def test_unknown_matchup(self, test_db, fantasy):
        with pytest.raises(NotFoundError):
            MatchupAggregator(test_db).compute_matchup_score(999)


class TestComputeWeek:

    def test_week_lists_every_matchup(self, test_db, fantasy, match):
        results = MatchupAggregator(test_db).compute_week(fantasy.matchup.league_id, 1)
        assert [r.matchup_id for r in results] == [fantasy.matchup.id]

    def test_empty_week(self, test_db, fantasy):
        assert MatchupAggregator(test_db).compute_week(fantasy.matchup.league_id, 5) == []

    def test_unknown_league(self, test_db, fantasy):
        with pytest.raises(NotFoundError):
            MatchupAggregator(test_db).compute_week(999, 1)


class TestState:

    def test_finished_and_not_started_mix_is_in_progress(self, test_db, world, fantasy, live_match):
        # Ridge Rangers' first fixture is week 1 for their players
        MatchLifecycleManager(test_db).create_match(
            world.tournament.id, world.season.id, world.third.id, world.away.id,
        )
        fantasy.opponent.flex1 = world.p["t_bat"].id
        test_db.commit()
        MatchLifecycleManager(test_db).finish_match(live_match.id, world.tournament.id)

        result = MatchupAggregator(test_db).compute_matchup_score(fantasy.matchup.id)
        assert result.state == MatchupState.IN_PROGRESS
        assert result.is_valid

    def test_abandoned_counts_as_closed(self, test_db, world, fantasy, live_match):
        MatchLifecycleManager(test_db).abandon_match(live_match.id, world.tournament.id)
        result = MatchupAggregator(test_db).compute_matchup_score(fantasy.matchup.id)
        assert result.state == MatchupState.COMPLETE

    def test_second_matchup_in_the_same_week(self, test_db, league, fantasy, match):
        test_db.add(FantasyMatchup(
            league_id=league.id, match_num=1,
            fantasy_team_instance1_id=fantasy.opponent.id,
            fantasy_team_instance2_id=fantasy.week1.id,
        ))
        test_db.commit()
        results = MatchupAggregator(test_db).compute_week(league.id, 1)
        assert len(results) == 2
        assert results[0].score1 == results[1].score2
