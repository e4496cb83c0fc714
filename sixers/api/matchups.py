"""
Matchup routes - live head-to-head scores
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sixers.database import get_db
from sixers.auth import Identity, get_identity
from sixers.engine.matchups import MatchupAggregator, MatchupResult, SideResult, PlayerLine
from sixers.api.schemas import MatchupResponse, MatchupSideResponse, PlayerPointsResponse

router = APIRouter(prefix="/matchups", tags=["Matchups"])


def _player_response(line: PlayerLine) -> PlayerPointsResponse:
    ref = line.performance
    return PlayerPointsResponse(
        slot=line.slot,
        player_id=line.player_id,
        is_captain=line.is_captain,
        is_vice_captain=line.is_vice_captain,
        match_id=ref.match_id if ref else None,
        match_status=ref.match_status.value if ref else None,
        has_played=bool(ref and ref.has_performance),
        standard_points=line.score.standard_points,
        band_points=line.score.band_points,
        multiplier=line.score.multiplier,
        points=line.points,
        breakdown=line.score.breakdown,
    )


def _side_response(side: SideResult) -> MatchupSideResponse:
    return MatchupSideResponse(
        instance_id=side.instance_id,
        fantasy_team_id=side.fantasy_team_id,
        total=side.total,
        players=[_player_response(p) for p in side.players],
    )


def matchup_response(result: MatchupResult) -> MatchupResponse:
    return MatchupResponse(
        matchup_id=result.matchup_id,
        league_id=result.league_id,
        match_num=result.match_num,
        state=result.state.value,
        is_valid=result.is_valid,
        score1=result.score1,
        score2=result.score2,
        side1=_side_response(result.side1),
        side2=_side_response(result.side2),
    )


@router.get("/{matchup_id}", response_model=MatchupResponse)
def get_matchup(
    matchup_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Both sides' totals with a per-player breakdown. Recomputed on every call."""
    return matchup_response(MatchupAggregator(db).compute_matchup_score(matchup_id))
