from typing import Optional, List
from sqlalchemy import String, Integer, ForeignKey, Enum, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from sixers.database import Base


class MatchStatus(enum.Enum):
    NOT_STARTED = "NS"
    LIVE = "LIVE"
    FINISHED = "FINISHED"
    ABANDONED = "ABAN."


# Allowed lifecycle moves, never backward
MATCH_TRANSITIONS = {
    MatchStatus.NOT_STARTED: {MatchStatus.LIVE},
    MatchStatus.LIVE: {MatchStatus.FINISHED, MatchStatus.ABANDONED},
    MatchStatus.FINISHED: set(),
    MatchStatus.ABANDONED: set(),
}


class WicketType(enum.Enum):
    CATCH = "CATCH"
    BOWLED = "BOWLED"
    LBW = "LBW"
    STUMPED = "STUMPED"
    RUN_OUT = "RUN_OUT"
    HIT_WICKET = "HIT_WICKET"


class ExtraType(enum.Enum):
    WIDE = "WIDE"
    NO_BALL = "NO_BALL"
    BYE = "BYE"
    LEG_BYE = "LEG_BYE"


class Match(Base):
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"))
    season_id: Mapped[int] = mapped_column(ForeignKey("seasons.id"))

    # Teams
    home_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    away_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    home_team: Mapped["Team"] = relationship("Team", foreign_keys=[home_team_id])
    away_team: Mapped["Team"] = relationship("Team", foreign_keys=[away_team_id])

    # Each team's own ordinal for this fixture in the season
    home_match_num: Mapped[int] = mapped_column(Integer, default=0)
    away_match_num: Mapped[int] = mapped_column(Integer, default=0)

    # Match info
    match_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    venue: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    inserted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    status: Mapped[MatchStatus] = mapped_column(Enum(MatchStatus), default=MatchStatus.NOT_STARTED)

    # Running totals per side
    home_team_score: Mapped[int] = mapped_column(Integer, default=0)
    home_team_wickets: Mapped[int] = mapped_column(Integer, default=0)
    home_team_balls: Mapped[int] = mapped_column(Integer, default=0)
    away_team_score: Mapped[int] = mapped_column(Integer, default=0)
    away_team_wickets: Mapped[int] = mapped_column(Integer, default=0)
    away_team_balls: Mapped[int] = mapped_column(Integer, default=0)

    ball_events: Mapped[List["BallEvent"]] = relationship(
        "BallEvent", back_populates="match", order_by="BallEvent.ball_num"
    )

    def side_of(self, team_id: int) -> Optional[str]:
        """'home' or 'away' for a participating team, None otherwise"""
        if team_id == self.home_team_id:
            return "home"
        if team_id == self.away_team_id:
            return "away"
        return None

    def opponent_of(self, team_id: int) -> int:
        return self.away_team_id if team_id == self.home_team_id else self.home_team_id

    def match_num_for(self, team_id: int) -> Optional[int]:
        side = self.side_of(team_id)
        if side is None:
            return None
        return self.home_match_num if side == "home" else self.away_match_num

    @property
    def is_live(self) -> bool:
        return self.status == MatchStatus.LIVE

    def __repr__(self):
        return f"<Match {self.id}: {self.home_team_id} vs {self.away_team_id} ({self.status.value})>"


class BallEvent(Base):
    """One delivery. Append-only: rows are never updated or reordered."""
    __tablename__ = "ball_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"))
    match: Mapped["Match"] = relationship("Match", back_populates="ball_events")
    ball_num: Mapped[int] = mapped_column(Integer)

    batting_team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))

    # Players involved
    striker_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    non_striker_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bowler_id: Mapped[int] = mapped_column(ForeignKey("players.id"))

    # Outcome
    runs_scored: Mapped[int] = mapped_column(Integer, default=0)
    balls_played: Mapped[int] = mapped_column(Integer, default=1)  # 0 for wides/no-balls
    four: Mapped[bool] = mapped_column(default=False)
    six: Mapped[bool] = mapped_column(default=False)
    extra_type: Mapped[Optional[ExtraType]] = mapped_column(Enum(ExtraType), nullable=True)

    # Wicket
    wicket_taken: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)  # player out
    wicket_type: Mapped[Optional[WicketType]] = mapped_column(Enum(WicketType), nullable=True)
    fielder_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    dropped_by_id: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)

    inserted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("match_id", "ball_num", name="unique_match_ball"),
    )

    @property
    def is_wicket(self) -> bool:
        return self.wicket_taken is not None

    def __repr__(self):
        return f"<Ball {self.ball_num}: {self.runs_scored} runs{' W' if self.is_wicket else ''}>"
