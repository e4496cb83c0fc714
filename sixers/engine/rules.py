"""
Scoring Rule Resolver - effective rule set for a league
"""
import logging
from collections import defaultdict
from typing import Iterator, Optional
from sqlalchemy.orm import Session

from sixers.errors import NotFoundError
from sixers.models.league import League, ScoringRule, RuleCategory, RuleMode
from sixers.engine.points import Rule, NumericBand, CAPTAIN_STAT, VICE_CAPTAIN_STAT

logger = logging.getLogger(__name__)


class RuleSet:
    """
    Effective rules keyed by stat name. Each stat maps to one group: a
    single rule for standard stats, or the full band table for a band stat.
    Iteration yields the rules ordered by category then stat.
    """

    def __init__(self, groups: dict[str, tuple[Rule, ...]], league_id: Optional[int] = None):
        self.league_id = league_id
        self._groups = groups

    def __iter__(self) -> Iterator[Rule]:
        for stat in self.stats():
            yield from self._groups[stat]

    def __len__(self):
        return sum(len(group) for group in self._groups.values())

    def __contains__(self, stat: str) -> bool:
        return stat in self._groups

    def stats(self) -> list[str]:
        return sorted(self._groups, key=lambda s: (self._groups[s][0].category, s))

    def group(self, stat: str) -> tuple[Rule, ...]:
        return self._groups.get(stat, ())

    def rule(self, stat: str) -> Optional[Rule]:
        group = self._groups.get(stat)
        return group[0] if group else None


def _band_sort_key(rule: Rule):
    lower = rule.band.lower if rule.band and rule.band.lower is not None else float("-inf")
    return lower


def _group_rows(rows: list[ScoringRule]) -> dict[str, tuple[Rule, ...]]:
    by_stat = defaultdict(list)
    for row in rows:
        by_stat[row.stat].append(row)

    groups = {}
    for stat, stat_rows in by_stat.items():
        band_rows = [r for r in stat_rows if r.mode == RuleMode.BAND.value]
        if band_rows:
            groups[stat] = tuple(sorted((Rule.from_model(r) for r in band_rows), key=_band_sort_key))
            continue
        # one standard row per (league, stat), see the unique indexes on ScoringRule
        groups[stat] = (Rule.from_model(stat_rows[0]),)
    return groups


class ScoringRuleResolver:
    """
    League rules replace the global defaults stat by stat; any stat the
    league does not define falls back to the default.
    """

    def __init__(self, session: Session):
        self.session = session

    def _rows(self, league_id: Optional[int]) -> list[ScoringRule]:
        query = self.session.query(ScoringRule)
        if league_id is None:
            query = query.filter(ScoringRule.league_id.is_(None))
        else:
            query = query.filter(ScoringRule.league_id == league_id)
        return query.order_by(ScoringRule.id).all()

    def global_rules(self) -> RuleSet:
        return RuleSet(_group_rows(self._rows(None)))

    def league_rules(self, league_id: int) -> RuleSet:
        """Only the rules the league itself defines"""
        return RuleSet(_group_rows(self._rows(league_id)), league_id=league_id)

    def resolve_rules(self, league_id: Optional[int]) -> RuleSet:
        if league_id is None:
            return self.global_rules()

        if self.session.get(League, league_id) is None:
            raise NotFoundError("League not found")

        groups = _group_rows(self._rows(None))
        groups.update(_group_rows(self._rows(league_id)))
        return RuleSet(groups, league_id=league_id)


# Default table installed by `cli.py seed-rules`
# (stat, category, mode, per_unit, flat, threshold, band, multiplier)
DEFAULT_RULES = [
    ("Points per run", "batting", "standard", 1, None, None, None, None),
    ("Bonus per 4", "batting", "standard", 1, None, None, None, None),
    ("Bonus per 6", "batting", "standard", 2, None, None, None, None),
    ("Bonus per half-century", "batting", "standard", None, 8, 50, None, None),
    ("Bonus per century", "batting", "standard", None, 8, 100, None, None),
    ("Duck-out Penalty", "batting", "standard", None, -2, None, None, None),
    ("Strike Rate", "batting", "band", None, -6, None, "[0,30]", None),
    ("Strike Rate", "batting", "band", None, -4, None, "(30,40)", None),
    ("Strike Rate", "batting", "band", None, -2, None, "[40,50]", None),
    ("Strike Rate", "batting", "band", None, 2, None, "[100,120)", None),
    ("Strike Rate", "batting", "band", None, 4, None, "[120,140)", None),
    ("Strike Rate", "batting", "band", None, 6, None, "[140,)", None),
    ("Points per Wicket", "bowling", "standard", 25, None, None, None, None),
    ("3-Wicket Bonus", "bowling", "standard", 4, None, 3, None, None),
    ("5-Wicket Bonus", "bowling", "standard", 5, None, 5, None, None),
    ("Economy", "bowling", "band", None, 6, None, "[0,2.5]", None),
    ("Economy", "bowling", "band", None, 4, None, "(2.5,3.5)", None),
    ("Economy", "bowling", "band", None, 2, None, "[3.5,4.5]", None),
    ("Economy", "bowling", "band", None, -2, None, "[7,8]", None),
    ("Economy", "bowling", "band", None, -4, None, "(8,9]", None),
    ("Economy", "bowling", "band", None, -6, None, "(9,)", None),
    ("Points per catch", "fielding", "standard", 8, None, None, None, None),
    ("3-Catches bonus", "fielding", "standard", 4, None, 3, None, None),
    ("Run Out", "fielding", "standard", 12, None, None, None, None),
    ("Dropped Catch", "fielding", "standard", -2, None, None, None, None),
    (CAPTAIN_STAT, RuleCategory.LEADERSHIP.value, "standard", None, None, None, None, 2),
    (VICE_CAPTAIN_STAT, RuleCategory.LEADERSHIP.value, "standard", None, None, None, None, 1.5),
]


def seed_default_rules(session: Session, league_id: Optional[int] = None) -> int:
    """Insert the default table for a scope that has no rules yet. Returns rows added."""
    existing = session.query(ScoringRule).filter(
        ScoringRule.league_id.is_(None) if league_id is None else ScoringRule.league_id == league_id
    ).count()
    if existing:
        return 0

    for stat, category, mode, per_unit, flat, threshold, band, multiplier in DEFAULT_RULES:
        parsed = NumericBand.parse(band) if band else None
        session.add(ScoringRule(
            league_id=league_id,
            stat=stat,
            category=category,
            mode=mode,
            per_unit_points=per_unit,
            flat_points=flat,
            threshold=threshold,
            band_lower=parsed.lower if parsed else None,
            band_upper=parsed.upper if parsed else None,
            band_bounds=parsed.bounds if parsed else "[)",
            multiplier=multiplier,
        ))
    session.commit()
    logger.info("Seeded %d scoring rules (league %s)", len(DEFAULT_RULES), league_id)
    return len(DEFAULT_RULES)
