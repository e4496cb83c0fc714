"""
League routes - scoring rule tables and weekly matchups
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sixers.database import get_db
from sixers.auth import Identity, get_identity
from sixers.engine.points import Rule
from sixers.engine.rules import RuleSet, ScoringRuleResolver
from sixers.engine.matchups import MatchupAggregator
from sixers.api.schemas import ScoringRuleResponse, RuleSetResponse, MatchupResponse
from sixers.api.matchups import matchup_response

router = APIRouter(prefix="/leagues", tags=["Leagues"])


def _rule_response(rule: Rule) -> ScoringRuleResponse:
    return ScoringRuleResponse(
        id=rule.id,
        league_id=rule.league_id,
        stat=rule.stat,
        category=rule.category,
        mode=rule.mode,
        per_unit_points=rule.per_unit_points,
        flat_points=rule.flat_points,
        threshold=rule.threshold,
        band=str(rule.band) if rule.band else None,
        multiplier=rule.multiplier,
    )


def rule_set_response(rules: RuleSet) -> RuleSetResponse:
    return RuleSetResponse(
        league_id=rules.league_id,
        rules=[_rule_response(r) for r in rules],
    )


@router.get("/scoring-rules", response_model=RuleSetResponse)
def get_default_rules(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Global default rules"""
    return rule_set_response(ScoringRuleResolver(db).resolve_rules(None))


@router.get("/{league_id}/scoring-rules", response_model=RuleSetResponse)
def get_league_rules(
    league_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Effective rules for a league: its own rules, defaults for everything else"""
    return rule_set_response(ScoringRuleResolver(db).resolve_rules(league_id))


@router.get("/{league_id}/matchups", response_model=List[MatchupResponse])
def get_week_matchups(
    league_id: int,
    week: int = Query(..., ge=1),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    results = MatchupAggregator(db).compute_week(league_id, week)
    return [matchup_response(r) for r in results]
