from typing import Optional
from sqlalchemy import String, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from sixers.database import Base


class Player(Base):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_name: Mapped[str] = mapped_column(String(100))
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # batter, bowler, ...

    def __repr__(self):
        return f"<Player {self.player_name}>"


class PlayerSeasonInfo(Base):
    """
    Binds a player to one team for one season.
    A player changing teams between seasons gets a new row; within a season
    the binding does not change.
    """
    __tablename__ = "player_season_info"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    season_id: Mapped[int] = mapped_column(ForeignKey("seasons.id"))
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"))

    player: Mapped["Player"] = relationship("Player")

    __table_args__ = (
        UniqueConstraint("player_id", "season_id", name="unique_player_season"),
    )

    def __repr__(self):
        return f"<PlayerSeasonInfo player={self.player_id} team={self.team_id} season={self.season_id}>"


# Counters carried by every performance row, in display order
PERFORMANCE_COUNTERS = (
    "runs_scored",
    "balls_faced",
    "fours",
    "sixes",
    "runs_conceded",
    "balls_bowled",
    "wickets_taken",
    "catches",
    "catches_dropped",
    "run_outs",
    "dismissals",
)


class PlayerPerformance(Base):
    """Cumulative stat line for one player in one real match"""
    __tablename__ = "player_performance"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_season_id: Mapped[int] = mapped_column(ForeignKey("player_season_info.id"))
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"))
    match_id: Mapped[int] = mapped_column(ForeignKey("matches.id"))
    inserted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Batting
    runs_scored: Mapped[int] = mapped_column(Integer, default=0)
    balls_faced: Mapped[int] = mapped_column(Integer, default=0)
    fours: Mapped[int] = mapped_column(Integer, default=0)
    sixes: Mapped[int] = mapped_column(Integer, default=0)

    # Bowling
    runs_conceded: Mapped[int] = mapped_column(Integer, default=0)
    balls_bowled: Mapped[int] = mapped_column(Integer, default=0)
    wickets_taken: Mapped[int] = mapped_column(Integer, default=0)

    # Fielding
    catches: Mapped[int] = mapped_column(Integer, default=0)
    catches_dropped: Mapped[int] = mapped_column(Integer, default=0)
    run_outs: Mapped[int] = mapped_column(Integer, default=0)
    dismissals: Mapped[int] = mapped_column(Integer, default=0)  # stumpings

    player_season: Mapped["PlayerSeasonInfo"] = relationship("PlayerSeasonInfo")

    __table_args__ = (
        UniqueConstraint("player_season_id", "match_id", name="unique_player_match_performance"),
    )

    @property
    def player_id(self) -> int:
        return self.player_season.player_id

    def counters(self) -> dict:
        return {name: getattr(self, name) or 0 for name in PERFORMANCE_COUNTERS}

    def __repr__(self):
        return f"<PlayerPerformance ps={self.player_season_id} match={self.match_id}: {self.runs_scored}({self.balls_faced})>"
