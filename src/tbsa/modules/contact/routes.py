"""Public contact form route."""

from fastapi import APIRouter

from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.contact.schemas import ContactRequest, ContactResponse
from tbsa.modules.contact.services import submit_contact_form


router = APIRouter(tags=["contact"])


@router.post(
    "/contact",
    response_model=ApiResponse[ContactResponse],
    summary="Send a contact message",
)
async def contact(data: ContactRequest) -> ApiResponse[ContactResponse]:
    submission_id = await submit_contact_form(data)
    return ok(
        ContactResponse(submission_id=submission_id),
        message="Message sent, we will get back to you soon",
    )
