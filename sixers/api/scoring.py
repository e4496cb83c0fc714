"""
Live scoring routes - match lifecycle and ball-by-ball events
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sixers.database import get_db
from sixers.auth import Identity, get_identity, require_tournament
from sixers.engine.lifecycle import MatchLifecycleManager
from sixers.engine.ball_events import BallEventProcessor
from sixers.engine.snapshots import MatchSnapshot
from sixers.models.match import Match, BallEvent
from sixers.api.schemas import (
    CreateMatchRequest, MatchResponse, MatchSnapshotResponse,
    PerformanceLineResponse, BallEventResponse, BallEventRequest,
)

router = APIRouter(prefix="/scoring", tags=["Scoring"])


def match_response(match: Match) -> MatchResponse:
    return MatchResponse(
        id=match.id,
        tournament_id=match.tournament_id,
        season_id=match.season_id,
        home_team_id=match.home_team_id,
        away_team_id=match.away_team_id,
        home_match_num=match.home_match_num,
        away_match_num=match.away_match_num,
        match_date=match.match_date,
        venue=match.venue,
        status=match.status.value,
        home_team_score=match.home_team_score or 0,
        home_team_wickets=match.home_team_wickets or 0,
        home_team_balls=match.home_team_balls or 0,
        away_team_score=match.away_team_score or 0,
        away_team_wickets=match.away_team_wickets or 0,
        away_team_balls=match.away_team_balls or 0,
    )


def _ball_response(ball: BallEvent) -> BallEventResponse:
    return BallEventResponse(
        id=ball.id,
        ball_num=ball.ball_num,
        batting_team_id=ball.batting_team_id,
        striker_id=ball.striker_id,
        non_striker_id=ball.non_striker_id,
        bowler_id=ball.bowler_id,
        runs_scored=ball.runs_scored,
        balls_played=ball.balls_played,
        four=ball.four,
        six=ball.six,
        extra_type=ball.extra_type.value if ball.extra_type else None,
        wicket_taken=ball.wicket_taken,
        wicket_type=ball.wicket_type.value if ball.wicket_type else None,
        fielder_id=ball.fielder_id,
        dropped_by_id=ball.dropped_by_id,
    )


def snapshot_response(snapshot: MatchSnapshot) -> MatchSnapshotResponse:
    return MatchSnapshotResponse(
        match=match_response(snapshot.match),
        home_team_players=[PerformanceLineResponse.model_validate(p) for p in snapshot.home_team_players],
        away_team_players=[PerformanceLineResponse.model_validate(p) for p in snapshot.away_team_players],
        timeline=[_ball_response(b) for b in snapshot.timeline],
    )


@router.post("/matches", response_model=MatchResponse, status_code=201)
def create_match(
    request: CreateMatchRequest,
    identity: Identity = Depends(require_tournament),
    db: Session = Depends(get_db),
):
    """Schedule a fixture in the caller's tournament"""
    match = MatchLifecycleManager(db).create_match(
        tournament_id=request.tournament_id,
        season_id=request.season_id,
        home_team_id=request.home_team_id,
        away_team_id=request.away_team_id,
        match_date=request.match_date,
        venue=request.venue,
        requester_tournament_id=identity.tournament_id,
    )
    return match_response(match)


@router.get("/{match_id}", response_model=MatchSnapshotResponse)
def get_match(
    match_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Current score, both rosters' stat lines and the ball timeline"""
    return snapshot_response(MatchLifecycleManager(db).snapshot(match_id))


@router.patch("/{match_id}/start", response_model=MatchSnapshotResponse)
def start_match(
    match_id: int,
    identity: Identity = Depends(require_tournament),
    db: Session = Depends(get_db),
):
    """Go LIVE and create a zeroed performance row for every player of both teams"""
    snapshot = MatchLifecycleManager(db).start_match(match_id, identity.tournament_id)
    return snapshot_response(snapshot)


@router.post("/{match_id}/events", response_model=MatchSnapshotResponse)
def add_event(
    match_id: int,
    request: BallEventRequest,
    identity: Identity = Depends(require_tournament),
    db: Session = Depends(get_db),
):
    snapshot = BallEventProcessor(db).add_event(match_id, identity.tournament_id, request.model_dump())
    return snapshot_response(snapshot)


@router.patch("/{match_id}/finish", response_model=MatchSnapshotResponse)
def finish_match(
    match_id: int,
    identity: Identity = Depends(require_tournament),
    db: Session = Depends(get_db),
):
    snapshot = MatchLifecycleManager(db).finish_match(match_id, identity.tournament_id)
    return snapshot_response(snapshot)


@router.patch("/{match_id}/abandon", response_model=MatchSnapshotResponse)
def abandon_match(
    match_id: int,
    identity: Identity = Depends(require_tournament),
    db: Session = Depends(get_db),
):
    snapshot = MatchLifecycleManager(db).abandon_match(match_id, identity.tournament_id)
    return snapshot_response(snapshot)
