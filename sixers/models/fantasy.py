from typing import Optional
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sixers.database import Base

# Roster layout. Only active slots score and may hold the captaincy.
ACTIVE_SLOTS = ("bat1", "bat2", "wicket1", "bowl1", "bowl2", "bowl3", "all1", "flex1")
BENCH_SLOTS = ("bench1", "bench2", "bench3", "bench4", "bench5", "bench6")
SLOT_NAMES = ACTIVE_SLOTS + BENCH_SLOTS


class FantasyTeam(Base):
    __tablename__ = "fantasy_teams"

    id: Mapped[int] = mapped_column(primary_key=True)
    league_id: Mapped[int] = mapped_column(ForeignKey("leagues.id"))
    user_id: Mapped[str] = mapped_column(String(64), index=True)  # identity subject
    team_name: Mapped[str] = mapped_column(String(100))

    league = relationship("League")

    def __repr__(self):
        return f"<FantasyTeam '{self.team_name}'>"


class FantasyTeamInstance(Base):
    """One fantasy team's roster for one fantasy week (match_num)"""
    __tablename__ = "fantasy_team_instance"

    id: Mapped[int] = mapped_column(primary_key=True)
    fantasy_team_id: Mapped[int] = mapped_column(ForeignKey("fantasy_teams.id"))
    fantasy_team: Mapped["FantasyTeam"] = relationship("FantasyTeam")
    match_num: Mapped[int] = mapped_column(Integer)

    # Active
    bat1: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bat2: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    wicket1: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bowl1: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bowl2: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bowl3: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    all1: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    flex1: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)

    # Bench
    bench1: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bench2: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bench3: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bench4: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bench5: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    bench6: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)

    captain: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    vice_captain: Mapped[Optional[int]] = mapped_column(ForeignKey("players.id"), nullable=True)
    is_locked: Mapped[bool] = mapped_column(default=False)

    __table_args__ = (
        UniqueConstraint("fantasy_team_id", "match_num", name="unique_team_week"),
    )

    def slots(self) -> dict[str, Optional[int]]:
        return {slot: getattr(self, slot) for slot in SLOT_NAMES}

    @property
    def active_player_ids(self) -> list[int]:
        return [getattr(self, slot) for slot in ACTIVE_SLOTS if getattr(self, slot) is not None]

    def __repr__(self):
        return f"<FantasyTeamInstance team={self.fantasy_team_id} week={self.match_num}>"


class FantasyMatchup(Base):
    """Head-to-head pairing for one week. Scores are derived on read."""
    __tablename__ = "fantasy_matchups"

    id: Mapped[int] = mapped_column(primary_key=True)
    league_id: Mapped[int] = mapped_column(ForeignKey("leagues.id"))
    match_num: Mapped[int] = mapped_column(Integer)
    fantasy_team_instance1_id: Mapped[int] = mapped_column(ForeignKey("fantasy_team_instance.id"))
    fantasy_team_instance2_id: Mapped[int] = mapped_column(ForeignKey("fantasy_team_instance.id"))

    instance1: Mapped["FantasyTeamInstance"] = relationship(
        "FantasyTeamInstance", foreign_keys=[fantasy_team_instance1_id]
    )
    instance2: Mapped["FantasyTeamInstance"] = relationship(
        "FantasyTeamInstance", foreign_keys=[fantasy_team_instance2_id]
    )

    def __repr__(self):
        return f"<FantasyMatchup {self.id} week={self.match_num}>"
