"""
Roster Mutation Guard - slot swaps and captaincy changes
"""
import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sixers.errors import ConflictError, InternalError, InvalidStateError, NotFoundError, ValidationError
from sixers.models.fantasy import FantasyTeamInstance, SLOT_NAMES
from sixers.engine.resolution import RosterResolver

logger = logging.getLogger(__name__)


class RosterMutationGuard:
    """
    Captaincy is frozen for a week once the current or the proposed captain
    has a performance row for that week. Plain slot swaps are not locked:
    moving players between bench and active does not rewrite past scoring.
    """

    def __init__(self, session: Session):
        self.session = session
        self.resolver = RosterResolver(session)

    def get_instance(self, instance_id: int) -> FantasyTeamInstance:
        instance = self.session.get(FantasyTeamInstance, instance_id)
        if instance is None:
            raise NotFoundError("Fantasy team instance not found")
        return instance

    def played_players(self, instance: FantasyTeamInstance, player_ids: list[Optional[int]]) -> list[int]:
        """Players among `player_ids` with a performance row for the instance's week"""
        league = instance.fantasy_team.league
        played = []
        for player_id in dict.fromkeys(p for p in player_ids if p is not None):
            ref = self.resolver.resolve_player(league.id, league.season_id, instance.match_num, player_id)
            if ref is not None and ref.has_performance:
                played.append(player_id)
        return played

    def update_captains(self, instance_id: int, captain: int, vice_captain: int) -> list[FantasyTeamInstance]:
        """
        Set captain and vice captain on this week and every later week of the
        same fantasy team. Returns the updated instances in week order.
        """
        instance = self.get_instance(instance_id)

        if instance.is_locked:
            raise InvalidStateError("Cannot update captain/vice captain - team instance is locked")
        if captain is None or vice_captain is None:
            raise ValidationError("Missing captain or vice_captain")
        if captain == vice_captain:
            raise ValidationError("Captain and vice captain must be different players")

        active = instance.active_player_ids
        if captain not in active:
            raise ValidationError("Captain must be an active player in the roster (not on bench)")
        if vice_captain not in active:
            raise ValidationError("Vice captain must be an active player in the roster (not on bench)")

        played = self.played_players(instance, [instance.captain, captain])
        if played:
            logger.warning("Captain change on instance %s blocked, already played: %s", instance.id, played)
            raise ConflictError(
                "Cannot update captain/vice captain - one or more players have already played in this match",
                players=played,
            )

        updated = (
            self.session.query(FantasyTeamInstance)
            .filter(
                FantasyTeamInstance.fantasy_team_id == instance.fantasy_team_id,
                FantasyTeamInstance.match_num >= instance.match_num,
            )
            .order_by(FantasyTeamInstance.match_num)
            .all()
        )
        try:
            for week in updated:
                week.captain = captain
                week.vice_captain = vice_captain
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise InternalError("Could not update captains") from exc

        logger.info(
            "Fantasy team %s captains set to %s/%s from week %s (%d instances)",
            instance.fantasy_team_id, captain, vice_captain, instance.match_num, len(updated),
        )
        return updated

    def swap_slots(self, instance_id: int, slot_a: str, slot_b: str) -> FantasyTeamInstance:
        for slot in (slot_a, slot_b):
            if slot not in SLOT_NAMES:
                raise ValidationError(f"Invalid slot name: {slot}")
        if slot_a == slot_b:
            raise ValidationError("Cannot swap a slot with itself")

        instance = self.get_instance(instance_id)
        if instance.is_locked:
            raise InvalidStateError("Cannot swap slots - team instance is locked")

        try:
            first, second = getattr(instance, slot_a), getattr(instance, slot_b)
            setattr(instance, slot_a, second)
            setattr(instance, slot_b, first)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise InternalError("Could not swap slots") from exc

        logger.info("Instance %s swapped %s <-> %s", instance.id, slot_a, slot_b)
        return instance
