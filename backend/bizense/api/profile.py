from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bizense.core.auth import get_current_user
from bizense.core.identity import AuthUser

router = APIRouter(tags=["profile"])


class ProfileResponse(BaseModel):
    id: str
    email: str | None
    role: str | None


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: AuthUser = Depends(get_current_user)):
    return ProfileResponse(id=str(current_user.id), email=current_user.email, role=current_user.role)
