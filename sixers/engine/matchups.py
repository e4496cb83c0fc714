"""
Matchup Aggregator - head-to-head fantasy totals for one week.

Totals are recomputed from performance rows on every read; nothing here
writes to the database.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Optional
from sqlalchemy.orm import Session

from sixers.errors import NotFoundError
from sixers.models.fantasy import FantasyMatchup, FantasyTeamInstance, ACTIVE_SLOTS
from sixers.models.league import League
from sixers.models.match import MatchStatus
from sixers.engine.points import PlayerScore, StatLine, score
from sixers.engine.resolution import PerformanceRef, RosterResolver
from sixers.engine.rules import RuleSet, ScoringRuleResolver

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (MatchStatus.FINISHED, MatchStatus.ABANDONED)


class MatchupState(enum.Enum):
    UPCOMING = "upcoming"         # no rostered player's match has started
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"         # every resolved match is finished or abandoned


@dataclass
class PlayerLine:
    slot: str
    player_id: int
    is_captain: bool
    is_vice_captain: bool
    performance: Optional[PerformanceRef]
    score: PlayerScore

    @property
    def points(self) -> float:
        return self.score.total


@dataclass
class SideResult:
    instance_id: int
    fantasy_team_id: int
    players: list[PlayerLine] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(line.points for line in self.players)


@dataclass
class MatchupResult:
    matchup_id: int
    league_id: int
    match_num: int
    side1: SideResult
    side2: SideResult
    state: MatchupState

    @property
    def is_valid(self) -> bool:
        """Enough real matches have started for the scores to mean something"""
        return self.state != MatchupState.UPCOMING

    @property
    def score1(self) -> float:
        return self.side1.total

    @property
    def score2(self) -> float:
        return self.side2.total


def matchup_state(refs: list[PerformanceRef]) -> MatchupState:
    statuses = {ref.match_id: ref.match_status for ref in refs}.values()
    if any(s == MatchStatus.LIVE for s in statuses):
        return MatchupState.IN_PROGRESS
    closed = [s for s in statuses if s in CLOSED_STATUSES]
    if not closed:
        return MatchupState.UPCOMING
    if len(closed) == len(statuses):
        return MatchupState.COMPLETE
    return MatchupState.IN_PROGRESS


class MatchupAggregator:
    def __init__(self, session: Session):
        self.session = session
        self.resolver = RosterResolver(session)
        self.rule_resolver = ScoringRuleResolver(session)

    def score_instance(self, instance: FantasyTeamInstance, rules: RuleSet) -> SideResult:
        """Active slots only; bench players never score"""
        side = SideResult(instance_id=instance.id, fantasy_team_id=instance.fantasy_team_id)
        resolved = self.resolver.resolve_instance(instance, active_only=True)

        for slot in ACTIVE_SLOTS:
            player_id = getattr(instance, slot)
            if player_id is None:
                continue
            ref = resolved.get(slot)
            is_captain = player_id == instance.captain
            is_vice_captain = player_id == instance.vice_captain
            stats = ref.stats if ref else StatLine()
            side.players.append(PlayerLine(
                slot=slot,
                player_id=player_id,
                is_captain=is_captain,
                is_vice_captain=is_vice_captain,
                performance=ref,
                score=score(stats, rules, is_captain, is_vice_captain),
            ))
        return side

    def _aggregate(self, matchup: FantasyMatchup, rules: RuleSet) -> MatchupResult:
        side1 = self.score_instance(matchup.instance1, rules)
        side2 = self.score_instance(matchup.instance2, rules)
        refs = [
            line.performance for line in side1.players + side2.players
            if line.performance is not None
        ]
        return MatchupResult(
            matchup_id=matchup.id,
            league_id=matchup.league_id,
            match_num=matchup.match_num,
            side1=side1,
            side2=side2,
            state=matchup_state(refs),
        )

    def compute_matchup_score(self, matchup_id: int) -> MatchupResult:
        matchup = self.session.get(FantasyMatchup, matchup_id)
        if matchup is None:
            raise NotFoundError("Matchup not found")
        rules = self.rule_resolver.resolve_rules(matchup.league_id)
        result = self._aggregate(matchup, rules)
        logger.debug("Matchup %s: %.1f - %.1f (%s)", matchup.id, result.score1, result.score2, result.state.value)
        return result

    def compute_week(self, league_id: int, fantasy_week: int) -> list[MatchupResult]:
        if self.session.get(League, league_id) is None:
            raise NotFoundError("League not found")
        rules = self.rule_resolver.resolve_rules(league_id)
        matchups = (
            self.session.query(FantasyMatchup)
            .filter_by(league_id=league_id, match_num=fantasy_week)
            .order_by(FantasyMatchup.id)
            .all()
        )
        return [self._aggregate(m, rules) for m in matchups]
