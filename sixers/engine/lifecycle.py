"""
Match Lifecycle Manager - fixture creation and status transitions
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sixers.errors import (
    ConflictError, ForbiddenError, InternalError, InvalidStateError, NotFoundError, ValidationError
)
from sixers.models.competition import Season, Team, Tournament
from sixers.models.match import Match, MatchStatus, MATCH_TRANSITIONS
from sixers.models.player import PlayerPerformance, PlayerSeasonInfo
from sixers.engine.snapshots import MatchSnapshot, build_match_snapshot

logger = logging.getLogger(__name__)


def authorize_match(match: Match, requester_tournament_id: Optional[int]):
    """The caller must operate within the tournament that owns the match"""
    if requester_tournament_id is None or match.tournament_id != requester_tournament_id:
        raise ForbiddenError("You are not allowed to modify this match")


class MatchLifecycleManager:
    """
    Owns match status: NOT_STARTED -> LIVE -> FINISHED or ABANDONED.
    Going LIVE provisions a zeroed performance row for every player on
    both teams, which is what the event processor and the scoring side
    later read and write.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_match(self, match_id: int) -> Match:
        match = self.session.get(Match, match_id)
        if match is None:
            raise NotFoundError("Match doesn't exist")
        return match

    def snapshot(self, match_id: int) -> MatchSnapshot:
        return build_match_snapshot(self.session, self.get_match(match_id))

    def _team_in_season(self, team_id: int, season_id: int) -> bool:
        return self.session.query(PlayerSeasonInfo).filter_by(
            team_id=team_id, season_id=season_id
        ).first() is not None

    def _next_match_num(self, team_id: int, season_id: int) -> int:
        played = self.session.query(Match).filter(
            Match.season_id == season_id,
            or_(Match.home_team_id == team_id, Match.away_team_id == team_id),
        ).count()
        return played + 1

    def create_match(
        self,
        tournament_id: int,
        season_id: int,
        home_team_id: int,
        away_team_id: int,
        match_date: Optional[datetime] = None,
        venue: Optional[str] = None,
        requester_tournament_id: Optional[int] = None,
    ) -> Match:
        """
        Schedule a fixture. Each side gets its own next ordinal in the season,
        so a team's 3rd match need not be its opponent's 3rd.
        """
        if requester_tournament_id is not None and requester_tournament_id != tournament_id:
            raise ForbiddenError("You are not allowed to create matches for this tournament")
        if home_team_id == away_team_id:
            raise ValidationError("Home and away team must be different")

        if self.session.get(Tournament, tournament_id) is None:
            raise NotFoundError("Tournament doesn't exist")
        season = self.session.get(Season, season_id)
        if season is None:
            raise NotFoundError("Season doesn't exist")
        if season.tournament_id != tournament_id:
            raise ValidationError("Given season doesn't belong in given tournament")

        for label, team_id in (("Home", home_team_id), ("Away", away_team_id)):
            if self.session.get(Team, team_id) is None:
                raise NotFoundError(f"{label} team doesn't exist")
            if not self._team_in_season(team_id, season_id):
                raise ValidationError(f"{label} team doesn't exist in season")

        match = Match(
            tournament_id=tournament_id,
            season_id=season_id,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            match_date=match_date or datetime.utcnow(),
            venue=venue,
            status=MatchStatus.NOT_STARTED,
            home_match_num=self._next_match_num(home_team_id, season_id),
            away_match_num=self._next_match_num(away_team_id, season_id),
        )
        try:
            self.session.add(match)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise InternalError("Could not create match") from exc

        logger.info("Created match %s (home #%s, away #%s)", match.id, match.home_match_num, match.away_match_num)
        return match

    def _check_transition(self, match: Match, target: MatchStatus):
        if target not in MATCH_TRANSITIONS[match.status]:
            raise InvalidStateError(
                f"Cannot move match from {match.status.name} to {target.name}"
            )

    def _provision_performances(self, match: Match) -> int:
        """Zeroed row per season player of both teams, skipping ones that exist"""
        existing = {
            ps_id for (ps_id,) in self.session.query(PlayerPerformance.player_season_id)
            .filter(PlayerPerformance.match_id == match.id)
        }
        season_players = self.session.query(PlayerSeasonInfo).filter(
            PlayerSeasonInfo.season_id == match.season_id,
            PlayerSeasonInfo.team_id.in_([match.home_team_id, match.away_team_id]),
        ).all()

        added = 0
        for psi in season_players:
            if psi.id in existing:
                continue
            self.session.add(PlayerPerformance(
                player_season_id=psi.id,
                team_id=psi.team_id,
                match_id=match.id,
            ))
            added += 1
        return added

    def start_match(self, match_id: int, requester_tournament_id: Optional[int]) -> MatchSnapshot:
        match = self.get_match(match_id)
        authorize_match(match, requester_tournament_id)
        self._check_transition(match, MatchStatus.LIVE)

        try:
            match.status = MatchStatus.LIVE
            added = self._provision_performances(match)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("Performance rows were created concurrently, retry") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise InternalError("Could not start match") from exc

        logger.info("Match %s is LIVE, provisioned %d performance rows", match.id, added)
        return build_match_snapshot(self.session, match)

    def _close(self, match_id: int, requester_tournament_id: Optional[int], target: MatchStatus) -> MatchSnapshot:
        match = self.get_match(match_id)
        authorize_match(match, requester_tournament_id)
        self._check_transition(match, target)

        try:
            match.status = target
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise InternalError("Could not update match status") from exc

        logger.info("Match %s is %s", match.id, target.name)
        return build_match_snapshot(self.session, match)

    def finish_match(self, match_id: int, requester_tournament_id: Optional[int]) -> MatchSnapshot:
        return self._close(match_id, requester_tournament_id, MatchStatus.FINISHED)

    def abandon_match(self, match_id: int, requester_tournament_id: Optional[int]) -> MatchSnapshot:
        return self._close(match_id, requester_tournament_id, MatchStatus.ABANDONED)
