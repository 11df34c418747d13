"""Invite code routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.permissions.decorators import require_permission
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.invite_codes.models import InviteCodeStatus
from tbsa.modules.invite_codes.schemas import (
    InviteCodeCreate,
    InviteCodeRedeem,
    InviteCodeResponse,
    RedeemResponse,
)
from tbsa.modules.invite_codes.services import InviteCodeSvc


router = APIRouter(prefix="/invite-codes", tags=["invite-codes"])


@router.get(
    "",
    response_model=ApiResponse[list[InviteCodeResponse]],
    summary="List invite codes",
    description="Lists codes of apartments in the buildings the caller administers.",
)
@require_permission("invite_codes", "read", "building")
async def list_invite_codes(
    auth: CurrentAuth,
    service: InviteCodeSvc,
    status_filter: Annotated[InviteCodeStatus | None, Query(alias="status")] = None,
    apartment_id: UUID | None = None,
) -> ApiResponse[list[InviteCodeResponse]]:
    codes = await service.list_codes(auth, status=status_filter, apartment_id=apartment_id)
    return ok([InviteCodeResponse.model_validate(c) for c in codes])


@router.post(
    "",
    response_model=ApiResponse[InviteCodeResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Generate an invite code",
    description="Issues a code for an unowned apartment, cancelling its previous active code.",
)
@require_permission("invite_codes", "create", "building")
async def create_invite_code(
    data: InviteCodeCreate,
    auth: CurrentAuth,
    service: InviteCodeSvc,
) -> ApiResponse[InviteCodeResponse]:
    invite = await service.create(auth, data.apartment_id, data.expires_in_days)
    return ok(InviteCodeResponse.model_validate(invite), message="Invite code created")


@router.post(
    "/redeem",
    response_model=ApiResponse[RedeemResponse],
    summary="Redeem an invite code",
    description="Claims the code's apartment for the current user.",
)
async def redeem_invite_code(
    data: InviteCodeRedeem,
    auth: CurrentAuth,
    service: InviteCodeSvc,
) -> ApiResponse[RedeemResponse]:
    apartment = await service.redeem(auth.user, data.code)
    return ok(
        RedeemResponse(
            apartment_id=apartment.id,
            apartment_number=apartment.number,
            building_id=apartment.building_id,
            building_name=apartment.building.name,
        ),
        message="Apartment claimed",
    )


@router.post(
    "/{invite_id}/cancel",
    response_model=ApiResponse[InviteCodeResponse],
    summary="Cancel an invite code",
)
@require_permission("invite_codes", "update", "building")
async def cancel_invite_code(
    invite_id: UUID,
    auth: CurrentAuth,
    service: InviteCodeSvc,
) -> ApiResponse[InviteCodeResponse]:
    invite = await service.cancel(auth, invite_id)
    return ok(InviteCodeResponse.model_validate(invite), message="Invite code cancelled")
