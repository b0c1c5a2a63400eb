"""Contact form route."""

from fastapi import APIRouter, HTTPException, status

from core.dependencies import ContactManagerDep
from core.exceptions import ValidationError
from schemas.contact import ContactRequest

router = APIRouter(prefix="/api", tags=["Contact"])


@router.post("/contact", status_code=status.HTTP_201_CREATED, summary="Send a message")
def send_message(req: ContactRequest, contact_manager: ContactManagerDep) -> dict:
    try:
        contact_manager.submit(
            name=req.name,
            email=req.email,
            subject=req.subject,
            message=req.message,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return {"success": True, "message": "Message sent successfully."}
