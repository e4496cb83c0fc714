"""
Shared fixtures: an in-memory database with one tournament, one season,
two playing teams and a fantasy league on top.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from sixers.database import Base
from sixers.models import (
    Tournament, Season, Team, Player, PlayerSeasonInfo,
    League, FantasyTeam, FantasyTeamInstance, FantasyMatchup,
)
from sixers.engine.ball_events import Delivery
from sixers.engine.lifecycle import MatchLifecycleManager
from sixers.engine.rules import seed_default_rules


@pytest.fixture
def db_engine():
    """In-memory SQLite shared by every connection of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_db(db_engine):
    session = Session(db_engine)
    yield session
    session.close()


ROSTERS = {
    "home": [("h_bat", "batter"), ("h_bat2", "batter"), ("h_bowl", "bowler"), ("h_wk", "wicketkeeper")],
    "away": [("a_bat", "batter"), ("a_bat2", "batter"), ("a_bowl", "bowler"), ("a_wk", "wicketkeeper")],
    "third": [("t_bat", "batter"), ("t_bowl", "bowler")],
}


@pytest.fixture
def world(test_db):
    """Tournament, season, teams and season rosters. Players are keyed by short name."""
    tournament = Tournament(name="Coastal Premier League", abbreviation="CPL")
    other_tournament = Tournament(name="Inland Cup", abbreviation="INC")
    test_db.add_all([tournament, other_tournament])
    test_db.flush()

    season = Season(tournament_id=tournament.id, start_year=2024, end_year=2024)
    other_season = Season(tournament_id=other_tournament.id, start_year=2024, end_year=2024)
    test_db.add_all([season, other_season])

    teams = {
        "home": Team(name="Harbour Hawks", short_name="HH"),
        "away": Team(name="Valley Vipers", short_name="VV"),
        "third": Team(name="Ridge Rangers", short_name="RR"),
        "idle": Team(name="Idle XI", short_name="IX"),
    }
    test_db.add_all(teams.values())
    test_db.flush()

    players = {}
    for side, roster in ROSTERS.items():
        for name, role in roster:
            player = Player(player_name=name, full_name=name.replace("_", " ").title(), role=role)
            test_db.add(player)
            test_db.flush()
            test_db.add(PlayerSeasonInfo(
                player_id=player.id,
                team_id=teams[side].id,
                season_id=season.id,
                tournament_id=tournament.id,
            ))
            players[name] = player
    test_db.commit()

    return SimpleNamespace(
        tournament=tournament,
        other_tournament=other_tournament,
        season=season,
        other_season=other_season,
        home=teams["home"],
        away=teams["away"],
        third=teams["third"],
        idle=teams["idle"],
        p=players,
    )


@pytest.fixture
def match(test_db, world):
    """Home vs away, not started. First match of the season for both."""
    return MatchLifecycleManager(test_db).create_match(
        tournament_id=world.tournament.id,
        season_id=world.season.id,
        home_team_id=world.home.id,
        away_team_id=world.away.id,
        venue="Harbour Oval",
        requester_tournament_id=world.tournament.id,
    )


@pytest.fixture
def live_match(test_db, world, match):
    MatchLifecycleManager(test_db).start_match(match.id, world.tournament.id)
    return match


@pytest.fixture
def default_rules(test_db):
    seed_default_rules(test_db)


@pytest.fixture
def league(test_db, world, default_rules):
    league = League(name="Office League", tournament_id=world.tournament.id, season_id=world.season.id)
    test_db.add(league)
    test_db.commit()
    return league


@pytest.fixture
def fantasy(test_db, world, league):
    """
    Two fantasy teams facing each other in week 1. Team 1 also has a week 2
    roster so captaincy changes can be seen carrying forward.
    """
    p = world.p
    team1 = FantasyTeam(league_id=league.id, user_id="user-1", team_name="Boundary Riders")
    team2 = FantasyTeam(league_id=league.id, user_id="user-2", team_name="Slip Cordon")
    test_db.add_all([team1, team2])
    test_db.flush()

    def team1_roster(week):
        return FantasyTeamInstance(
            fantasy_team_id=team1.id,
            match_num=week,
            bat1=p["h_bat"].id,
            bat2=p["a_bat"].id,
            wicket1=p["h_wk"].id,
            bowl1=p["a_bowl"].id,
            bench1=p["h_bat2"].id,
            captain=p["h_bat"].id,
            vice_captain=p["a_bowl"].id,
        )

    week1 = team1_roster(1)
    week2 = team1_roster(2)
    opponent = FantasyTeamInstance(
        fantasy_team_id=team2.id,
        match_num=1,
        bat1=p["a_bat2"].id,
        wicket1=p["a_wk"].id,
        bowl1=p["h_bowl"].id,
        captain=p["a_bat2"].id,
        vice_captain=p["h_bowl"].id,
    )
    test_db.add_all([week1, week2, opponent])
    test_db.flush()

    matchup = FantasyMatchup(
        league_id=league.id,
        match_num=1,
        fantasy_team_instance1_id=week1.id,
        fantasy_team_instance2_id=opponent.id,
    )
    test_db.add(matchup)
    test_db.commit()

    return SimpleNamespace(
        team1=team1, team2=team2,
        week1=week1, week2=week2, opponent=opponent,
        matchup=matchup,
    )


@pytest.fixture
def delivery(world):
    """Builder for deliveries: home batting, h_bat facing a_bowl, a dot ball unless overridden"""
    def build(match, **overrides) -> Delivery:
        values = dict(
            match_id=match.id,
            batting_team_id=world.home.id,
            striker_id=world.p["h_bat"].id,
            non_striker_id=world.p["h_bat2"].id,
            bowler_id=world.p["a_bowl"].id,
        )
        values.update(overrides)
        return Delivery(**values)
    return build
