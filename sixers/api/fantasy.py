"""
Fantasy team instance routes - weekly roster reads and edits
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sixers.database import get_db
from sixers.auth import Identity, get_identity
from sixers.errors import NotFoundError
from sixers.models.fantasy import FantasyTeamInstance, ACTIVE_SLOTS
from sixers.engine.resolution import RosterResolver
from sixers.engine.roster import RosterMutationGuard
from sixers.api.schemas import (
    InstancePerformanceResponse, SlotPerformanceResponse, StatLineResponse,
    CaptainsRequest, CaptainsResponse, SwapSlotsRequest, InstanceResponse,
)

router = APIRouter(prefix="/fantasy-team-instance", tags=["Fantasy Teams"])


def _get_owned_instance(instance_id: int, identity: Identity, db: Session) -> FantasyTeamInstance:
    instance = db.get(FantasyTeamInstance, instance_id)
    # Someone else's team looks the same as a missing one
    if instance is None or instance.fantasy_team.user_id != identity.user_id:
        raise NotFoundError("Fantasy team instance not found or you don't have access")
    return instance


def instance_response(instance: FantasyTeamInstance) -> InstanceResponse:
    return InstanceResponse(
        id=instance.id,
        fantasy_team_id=instance.fantasy_team_id,
        match_num=instance.match_num,
        slots=instance.slots(),
        captain=instance.captain,
        vice_captain=instance.vice_captain,
        is_locked=instance.is_locked,
    )


@router.get("/{instance_id}/performances", response_model=InstancePerformanceResponse)
def get_instance_performances(
    instance_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Each rostered player's real match and stat line for this week"""
    instance = _get_owned_instance(instance_id, identity, db)
    resolved = RosterResolver(db).resolve_instance(instance)

    slots = []
    for slot, ref in resolved.items():
        slots.append(SlotPerformanceResponse(
            slot=slot,
            player_id=getattr(instance, slot),
            is_active=slot in ACTIVE_SLOTS,
            match_id=ref.match_id if ref else None,
            match_status=ref.match_status.value if ref else None,
            has_played=bool(ref and ref.has_performance),
            stats=StatLineResponse.model_validate(ref.stats) if ref and ref.has_performance else None,
        ))

    return InstancePerformanceResponse(
        instance_id=instance.id,
        fantasy_team_id=instance.fantasy_team_id,
        match_num=instance.match_num,
        slots=slots,
    )


@router.patch("/{instance_id}/captains", response_model=CaptainsResponse)
def update_captains(
    instance_id: int,
    request: CaptainsRequest,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Applies to this week and every later week of the team"""
    _get_owned_instance(instance_id, identity, db)
    updated = RosterMutationGuard(db).update_captains(instance_id, request.captain, request.vice_captain)
    return CaptainsResponse(updated=[instance_response(i) for i in updated])


@router.post("/{instance_id}/swap-slots", response_model=InstanceResponse)
def swap_slots(
    instance_id: int,
    request: SwapSlotsRequest,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    _get_owned_instance(instance_id, identity, db)
    instance = RosterMutationGuard(db).swap_slots(instance_id, request.slot_a, request.slot_b)
    return instance_response(instance)
