"""
Points Calculator - turns one player's stat line into fantasy points.

Pure functions over plain dataclasses: nothing in here touches the session,
so the arithmetic can be tested without a database.

Order of evaluation:
1. Standard rules (mode "standard", category not "leadership") add up
2. Band rules add their flat points when the derived ratio is in the band
3. The sum is multiplied by the captain / vice-captain multipliers
"""
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from sixers.models.league import RuleCategory, RuleMode

CAPTAIN_STAT = "Captaincy Multiplier"
VICE_CAPTAIN_STAT = "Vice Captaincy Multiplier"

STRIKE_RATE_STAT = "Strike Rate"
ECONOMY_STAT = "Economy"


@dataclass(frozen=True)
class NumericBand:
    """
    Numeric range with PostgreSQL range bound flags.
    "[)" includes lower, excludes upper. None on either side is unbounded.
    """
    lower: Optional[float] = None
    upper: Optional[float] = None
    bounds: str = "[)"

    def contains(self, value: float) -> bool:
        if self.lower is not None:
            if self.bounds[0] == "[" and value < self.lower:
                return False
            if self.bounds[0] == "(" and value <= self.lower:
                return False
        if self.upper is not None:
            if self.bounds[1] == "]" and value > self.upper:
                return False
            if self.bounds[1] == ")" and value >= self.upper:
                return False
        return True

    @classmethod
    def parse(cls, text: str) -> "NumericBand":
        """Parse a range literal such as "[120,140)" or "(9,)"."""
        text = text.strip()
        if len(text) < 3 or text[0] not in "[(" or text[-1] not in "])" or "," not in text:
            raise ValueError(f"Not a range literal: {text!r}")
        low, high = text[1:-1].split(",", 1)
        return cls(
            lower=float(low) if low.strip() else None,
            upper=float(high) if high.strip() else None,
            bounds=text[0] + text[-1],
        )

    def __str__(self):
        low = "" if self.lower is None else f"{self.lower:g}"
        high = "" if self.upper is None else f"{self.upper:g}"
        return f"{self.bounds[0]}{low},{high}{self.bounds[1]}"


@dataclass(frozen=True)
class Rule:
    """Plain copy of a ScoringRule row"""
    stat: str
    category: str
    mode: str = RuleMode.STANDARD.value
    per_unit_points: Optional[float] = None
    flat_points: Optional[float] = None
    threshold: Optional[float] = None
    band: Optional[NumericBand] = None
    multiplier: Optional[float] = None
    league_id: Optional[int] = None
    id: Optional[int] = None

    @classmethod
    def from_model(cls, row) -> "Rule":
        band = None
        if row.mode == RuleMode.BAND.value:
            band = NumericBand(row.band_lower, row.band_upper, row.band_bounds or "[)")
        return cls(
            stat=row.stat,
            category=row.category,
            mode=row.mode,
            per_unit_points=row.per_unit_points,
            flat_points=row.flat_points,
            threshold=row.threshold,
            band=band,
            multiplier=row.multiplier,
            league_id=row.league_id,
            id=row.id,
        )

    @property
    def is_band(self) -> bool:
        return self.mode == RuleMode.BAND.value

    @property
    def is_leadership(self) -> bool:
        return self.category == RuleCategory.LEADERSHIP.value


@dataclass
class StatLine:
    """Counters the calculator reads. A missing performance is all zeros."""
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
    def from_performance(cls, performance) -> "StatLine":
        if performance is None:
            return cls()
        return cls(**performance.counters())

    @property
    def strike_rate(self) -> Optional[float]:
        if self.balls_faced <= 0:
            return None
        return self.runs_scored * 100.0 / self.balls_faced

    @property
    def economy(self) -> Optional[float]:
        if self.balls_bowled <= 0:
            return None
        return self.runs_conceded * 6.0 / self.balls_bowled


@dataclass
class PlayerScore:
    standard_points: float = 0.0
    band_points: float = 0.0
    multiplier: float = 1.0
    breakdown: dict[str, float] = field(default_factory=dict)

    @property
    def base_points(self) -> float:
        return self.standard_points + self.band_points

    @property
    def total(self) -> float:
        return self.base_points * self.multiplier


def _per_unit(counter: str):
    def evaluate(stats: StatLine, rule: Rule) -> float:
        return getattr(stats, counter) * (rule.per_unit_points or 0)
    return evaluate


def _flat_at_least(counter: str, default_threshold: float):
    def evaluate(stats: StatLine, rule: Rule) -> float:
        threshold = rule.threshold if rule.threshold is not None else default_threshold
        if getattr(stats, counter) >= threshold:
            return rule.flat_points or 0
        return 0
    return evaluate


def _per_multiple(counter: str, default_every: int):
    # floor(count / N) * points, so 6 wickets pays a 3-wicket bonus twice
    def evaluate(stats: StatLine, rule: Rule) -> float:
        # a multiple below one is meaningless; use the stat's own default
        every = int(rule.threshold) if rule.threshold is not None and rule.threshold >= 1 else default_every
        return math.floor(getattr(stats, counter) / every) * (rule.per_unit_points or 0)
    return evaluate


def _duck(stats: StatLine, rule: Rule) -> float:
    # batted and scored nothing; did-not-bat is not a duck
    if stats.runs_scored == 0 and stats.balls_faced > 0:
        return rule.flat_points or 0
    return 0


STANDARD_EVALUATORS = {
    # Batting
    "Points per run": _per_unit("runs_scored"),
    "Bonus per 4": _per_unit("fours"),
    "Bonus per 6": _per_unit("sixes"),
    "Bonus per half-century": _flat_at_least("runs_scored", 50),
    "Bonus per century": _flat_at_least("runs_scored", 100),
    "Duck-out Penalty": _duck,
    # Bowling
    "Points per Wicket": _per_unit("wickets_taken"),
    "3-Wicket Bonus": _per_multiple("wickets_taken", 3),
    "5-Wicket Bonus": _per_multiple("wickets_taken", 5),
    # Fielding
    "Points per catch": _per_unit("catches"),
    "3-Catches bonus": _per_multiple("catches", 3),
    "Run Out": _per_unit("run_outs"),
    "Dropped Catch": _per_unit("catches_dropped"),
}

BAND_RATIOS = {
    STRIKE_RATE_STAT: lambda stats: stats.strike_rate,
    ECONOMY_STAT: lambda stats: stats.economy,
}


def standard_points(stats: StatLine, rule: Rule) -> float:
    evaluator = STANDARD_EVALUATORS.get(rule.stat)
    if evaluator is None:
        return 0
    return evaluator(stats, rule)


def band_points(stats: StatLine, rule: Rule) -> float:
    ratio_of = BAND_RATIOS.get(rule.stat)
    if ratio_of is None or rule.band is None:
        return 0
    ratio = ratio_of(stats)
    if ratio is None or not rule.band.contains(ratio):
        return 0
    return rule.flat_points or 0


def find_multiplier(rules: Iterable[Rule], stat: str) -> float:
    """Multiplier for a leadership stat, keyed only by stat name. Defaults to 1."""
    for rule in rules:
        if rule.stat == stat and rule.multiplier is not None:
            return rule.multiplier
    return 1.0


def score(
    stats: StatLine,
    rules: Iterable[Rule],
    is_captain: bool = False,
    is_vice_captain: bool = False,
) -> PlayerScore:
    """
    Fantasy points for one stat line under one rule set.

    Overlapping bands for the same stat each contribute; keeping bands
    disjoint is the league author's job.
    """
    rules = list(rules)
    result = PlayerScore()

    for rule in rules:
        if rule.is_leadership:
            continue
        if rule.is_band:
            points = band_points(stats, rule)
            result.band_points += points
        else:
            points = standard_points(stats, rule)
            result.standard_points += points
        if points:
            result.breakdown[rule.stat] = result.breakdown.get(rule.stat, 0) + points

    if is_captain:
        result.multiplier *= find_multiplier(rules, CAPTAIN_STAT)
    if is_vice_captain:
        result.multiplier *= find_multiplier(rules, VICE_CAPTAIN_STAT)

    return result
