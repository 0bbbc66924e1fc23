"""
Public profile endpoint (no authentication; the token is the credential)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ems.core.deps import get_db
from ems.core.exceptions import NotFoundError
from ems.schemas.public_profile import PublicProfileOut
from ems.services.public_profile_service import render_public_profile

router = APIRouter()


@router.get("/profile/{token}", response_model=PublicProfileOut)
async def public_profile_endpoint(
    token: str,
    db: Session = Depends(get_db),
):
    """
    Profile behind a scanned QR code

    Unknown, revoked and deactivated all answer the same 404 so the endpoint
    does not reveal which tokens ever existed.
    """
    profile = render_public_profile(db, token)
    if profile is None:
        raise NotFoundError("Profile not found")
    return PublicProfileOut(status=profile.status, fields=profile.fields)
