from typing import Optional
from sqlalchemy import String, Float, ForeignKey, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
import enum
from sixers.database import Base


class RuleMode(enum.Enum):
    STANDARD = "standard"
    BAND = "band"


class RuleCategory(enum.Enum):
    BATTING = "batting"
    BOWLING = "bowling"
    FIELDING = "fielding"
    LEADERSHIP = "leadership"


class League(Base):
    __tablename__ = "leagues"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"))
    season_id: Mapped[int] = mapped_column(ForeignKey("seasons.id"))

    def __repr__(self):
        return f"<League '{self.name}'>"


class ScoringRule(Base):
    """
    One scoring rule. ``league_id`` NULL marks a global default; a league
    overrides a default by defining a rule with the same ``stat``.

    Band rules store a numeric range as lower/upper plus PostgreSQL-style
    bound flags, e.g. "[)" for lower-inclusive, upper-exclusive. A missing
    bound is unbounded on that side. A band stat may have several rows, one
    per band; a standard stat has one row per league.
    """
    __tablename__ = "league_scoring_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    league_id: Mapped[Optional[int]] = mapped_column(ForeignKey("leagues.id"), nullable=True)
    stat: Mapped[str] = mapped_column(String(50))
    category: Mapped[str] = mapped_column(String(20))  # RuleCategory value
    mode: Mapped[str] = mapped_column(String(20), default=RuleMode.STANDARD.value)

    per_unit_points: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    flat_points: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    threshold: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    band_lower: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    band_upper: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    band_bounds: Mapped[str] = mapped_column(String(2), default="[)")

    multiplier: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        scope = self.league_id if self.league_id is not None else "default"
        return f"<ScoringRule {self.stat} ({scope})>"


# NULL never equals NULL in a unique index, so the global scope and open band
# edges are folded onto sentinels before comparison.
_rules = ScoringRule.__table__.c
_scope = func.coalesce(_rules.league_id, 0)
_STANDARD = _rules.mode == RuleMode.STANDARD.value
_BAND = _rules.mode == RuleMode.BAND.value
UNBOUNDED = 1e12

Index(
    "uq_scoring_rule_standard_stat",
    _scope, _rules.stat,
    unique=True,
    sqlite_where=_STANDARD,
    postgresql_where=_STANDARD,
)
Index(
    "uq_scoring_rule_band",
    _scope, _rules.stat,
    func.coalesce(_rules.band_lower, -UNBOUNDED),
    func.coalesce(_rules.band_upper, UNBOUNDED),
    unique=True,
    sqlite_where=_BAND,
    postgresql_where=_BAND,
)
