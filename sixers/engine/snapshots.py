"""
Response assembly for live matches.

Builds the match + roster performances + ball timeline aggregate returned by
the lifecycle and event endpoints.
"""
from dataclasses import dataclass, field
from typing import Optional
from sqlalchemy.orm import Session, joinedload

from sixers.models.match import Match, BallEvent
from sixers.models.player import PlayerPerformance, PlayerSeasonInfo


@dataclass
class PerformanceLine:
    """One player's row in a match, flattened with player details"""
    performance_id: int
    player_season_id: int
    player_id: int
    player_name: str
    full_name: Optional[str]
    role: Optional[str]
    team_id: int
    match_id: int
    runs_scored: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    runs_conceded: int = 0
    balls_bowled: int = 0
    wickets_taken: int = 0
    catches: int = 0
    catches_dropped: int = 0
    run_outs: int = 0
    dismissals: int = 0

    @classmethod
    def from_performance(cls, perf: PlayerPerformance) -> "PerformanceLine":
        player = perf.player_season.player
        return cls(
            performance_id=perf.id,
            player_season_id=perf.player_season_id,
            player_id=player.id,
            player_name=player.player_name,
            full_name=player.full_name,
            role=player.role,
            team_id=perf.team_id,
            match_id=perf.match_id,
            **perf.counters(),
        )


@dataclass
class MatchSnapshot:
    match: Match
    home_team_players: list[PerformanceLine] = field(default_factory=list)
    away_team_players: list[PerformanceLine] = field(default_factory=list)
    timeline: list[BallEvent] = field(default_factory=list)


def match_performances(session: Session, match_id: int) -> list[PlayerPerformance]:
    return (
        session.query(PlayerPerformance)
        .options(joinedload(PlayerPerformance.player_season).joinedload(PlayerSeasonInfo.player))
        .filter(PlayerPerformance.match_id == match_id)
        .order_by(PlayerPerformance.id)
        .all()
    )


def build_match_snapshot(session: Session, match: Match) -> MatchSnapshot:
    """Current state of a match: both rosters' stat lines and every ball so far"""
    snapshot = MatchSnapshot(match=match)
    for perf in match_performances(session, match.id):
        line = PerformanceLine.from_performance(perf)
        if perf.team_id == match.home_team_id:
            snapshot.home_team_players.append(line)
        elif perf.team_id == match.away_team_id:
            snapshot.away_team_players.append(line)

    snapshot.timeline = (
        session.query(BallEvent)
        .filter(BallEvent.match_id == match.id)
        .order_by(BallEvent.ball_num)
        .all()
    )
    return snapshot
