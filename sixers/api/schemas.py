"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel
from typing import Optional, List, Dict
from datetime import datetime


# Match Schemas
class CreateMatchRequest(BaseModel):
    tournament_id: int
    season_id: int
    home_team_id: int
    away_team_id: int
    match_date: Optional[datetime] = None
    venue: Optional[str] = None


class MatchResponse(BaseModel):
    id: int
    tournament_id: int
    season_id: int
    home_team_id: int
    away_team_id: int
    home_match_num: int
    away_match_num: int
    match_date: Optional[datetime] = None
    venue: Optional[str] = None
    status: str
    home_team_score: int
    home_team_wickets: int
    home_team_balls: int
    away_team_score: int
    away_team_wickets: int
    away_team_balls: int


class PerformanceLineResponse(BaseModel):
    performance_id: int
    player_season_id: int
    player_id: int
    player_name: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    team_id: int
    match_id: int
    runs_scored: int
    balls_faced: int
    fours: int
    sixes: int
    runs_conceded: int
    balls_bowled: int
    wickets_taken: int
    catches: int
    catches_dropped: int
    run_outs: int
    dismissals: int

    class Config:
        from_attributes = True


class BallEventResponse(BaseModel):
    id: int
    ball_num: int
    batting_team_id: int
    striker_id: int
    non_striker_id: Optional[int] = None
    bowler_id: int
    runs_scored: int
    balls_played: int
    four: bool
    six: bool
    extra_type: Optional[str] = None
    wicket_taken: Optional[int] = None
    wicket_type: Optional[str] = None
    fielder_id: Optional[int] = None
    dropped_by_id: Optional[int] = None


class MatchSnapshotResponse(BaseModel):
    match: MatchResponse
    home_team_players: List[PerformanceLineResponse]
    away_team_players: List[PerformanceLineResponse]
    timeline: List[BallEventResponse]


class BallEventRequest(BaseModel):
    """One delivery as sent by the scorer app"""
    match_id: int
    batting_team: int
    striker: int
    bowler: int
    non_striker: Optional[int] = None
    runs_scored: int = 0
    balls_played: int = 1
    four: bool = False
    six: bool = False
    extra_type: Optional[str] = None  # WIDE, NO_BALL, BYE, LEG_BYE
    wicket_taken: Optional[int] = None  # id of the batter who is out
    wicket_type: Optional[str] = None  # CATCH, BOWLED, LBW, STUMPED, RUN_OUT, HIT_WICKET
    fielder: Optional[int] = None
    drop_catch: Optional[int] = None
    ball_num: Optional[int] = None


# Scoring rule Schemas
class ScoringRuleResponse(BaseModel):
    id: Optional[int] = None
    league_id: Optional[int] = None
    stat: str
    category: str
    mode: str
    per_unit_points: Optional[float] = None
    flat_points: Optional[float] = None
    threshold: Optional[float] = None
    band: Optional[str] = None  # e.g. "[120,140)"
    multiplier: Optional[float] = None


class RuleSetResponse(BaseModel):
    league_id: Optional[int] = None
    rules: List[ScoringRuleResponse]


# Matchup Schemas
class PlayerPointsResponse(BaseModel):
    slot: str
    player_id: int
    is_captain: bool
    is_vice_captain: bool
    match_id: Optional[int] = None
    match_status: Optional[str] = None
    has_played: bool
    standard_points: float
    band_points: float
    multiplier: float
    points: float
    breakdown: Dict[str, float]


class MatchupSideResponse(BaseModel):
    instance_id: int
    fantasy_team_id: int
    total: float
    players: List[PlayerPointsResponse]


class MatchupResponse(BaseModel):
    matchup_id: int
    league_id: int
    match_num: int
    state: str
    is_valid: bool
    score1: float
    score2: float
    side1: MatchupSideResponse
    side2: MatchupSideResponse


# Fantasy team instance Schemas
class StatLineResponse(BaseModel):
    runs_scored: int
    balls_faced: int
    fours: int
    sixes: int
    runs_conceded: int
    balls_bowled: int
    wickets_taken: int
    catches: int
    catches_dropped: int
    run_outs: int
    dismissals: int

    class Config:
        from_attributes = True


class SlotPerformanceResponse(BaseModel):
    slot: str
    player_id: int
    is_active: bool
    match_id: Optional[int] = None
    match_status: Optional[str] = None
    has_played: bool
    stats: Optional[StatLineResponse] = None


class InstancePerformanceResponse(BaseModel):
    instance_id: int
    fantasy_team_id: int
    match_num: int
    slots: List[SlotPerformanceResponse]


class CaptainsRequest(BaseModel):
    captain: int
    vice_captain: int


class SwapSlotsRequest(BaseModel):
    slot_a: str
    slot_b: str


class InstanceResponse(BaseModel):
    id: int
    fantasy_team_id: int
    match_num: int
    slots: Dict[str, Optional[int]]
    captain: Optional[int] = None
    vice_captain: Optional[int] = None
    is_locked: bool


class CaptainsResponse(BaseModel):
    updated: List[InstanceResponse]
