"""
Roster Resolution Pipeline - fantasy week -> real match -> performance row.

A fantasy week is an index into each real team's own fixture list. For a
player that means: find the team they play for this season, find that
team's Nth match (as home side or away side), then read the player's
performance row for it.
"""
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import or_, and_
from sqlalchemy.orm import Session

from sixers.errors import NotFoundError
from sixers.models.fantasy import FantasyTeamInstance, SLOT_NAMES, ACTIVE_SLOTS
from sixers.models.league import League
from sixers.models.match import Match, MatchStatus
from sixers.models.player import PlayerPerformance, PlayerSeasonInfo
from sixers.engine.points import StatLine


@dataclass
class PerformanceRef:
    """Where a rostered player's points for a week come from"""
    player_id: int
    player_season_id: int
    team_id: int
    match_id: int
    match_status: MatchStatus
    performance_id: Optional[int]
    stats: StatLine

    @property
    def has_performance(self) -> bool:
        """A performance row exists, i.e. the player's match has gone live"""
        return self.performance_id is not None


class RosterResolver:
    def __init__(self, session: Session):
        self.session = session
        self._match_cache: dict[tuple[int, int, int], Optional[Match]] = {}

    def find_match(self, team_id: int, season_id: int, fantasy_week: int) -> Optional[Match]:
        """The team's `fantasy_week`-th match of the season, home or away"""
        key = (team_id, season_id, fantasy_week)
        if key not in self._match_cache:
            self._match_cache[key] = (
                self.session.query(Match)
                .filter(
                    Match.season_id == season_id,
                    or_(
                        and_(Match.home_team_id == team_id, Match.home_match_num == fantasy_week),
                        and_(Match.away_team_id == team_id, Match.away_match_num == fantasy_week),
                    ),
                )
                .order_by(Match.id)
                .first()
            )
        return self._match_cache[key]

    def resolve_player(
        self,
        league_id: Optional[int],
        season_id: int,
        fantasy_week: int,
        player_id: int,
    ) -> Optional[PerformanceRef]:
        """
        None when the player has no team this season or their team has no
        match at this week yet (bye or not scheduled). A match without a
        performance row yet resolves to a zero stat line.

        The season passed in decides which team the player counts for, so a
        player who moved teams resolves against the right fixture list.
        """
        psi_query = self.session.query(PlayerSeasonInfo).filter(
            PlayerSeasonInfo.player_id == player_id,
            PlayerSeasonInfo.season_id == season_id,
        )
        if league_id is not None:
            league = self.session.get(League, league_id)
            if league is None:
                raise NotFoundError("League not found")
            psi_query = psi_query.filter(PlayerSeasonInfo.tournament_id == league.tournament_id)

        psi = psi_query.first()
        if psi is None:
            return None

        match = self.find_match(psi.team_id, season_id, fantasy_week)
        if match is None:
            return None

        perf = self.session.query(PlayerPerformance).filter_by(
            player_season_id=psi.id, match_id=match.id
        ).one_or_none()

        return PerformanceRef(
            player_id=player_id,
            player_season_id=psi.id,
            team_id=psi.team_id,
            match_id=match.id,
            match_status=match.status,
            performance_id=perf.id if perf else None,
            stats=StatLine.from_performance(perf),
        )

    def resolve_instance(
        self, instance: FantasyTeamInstance, active_only: bool = False
    ) -> dict[str, Optional[PerformanceRef]]:
        """Resolve every occupied slot of an instance for its own week"""
        league = instance.fantasy_team.league
        slots = ACTIVE_SLOTS if active_only else SLOT_NAMES
        resolved = {}
        for slot in slots:
            player_id = getattr(instance, slot)
            if player_id is None:
                continue
            resolved[slot] = self.resolve_player(league.id, league.season_id, instance.match_num, player_id)
        return resolved
