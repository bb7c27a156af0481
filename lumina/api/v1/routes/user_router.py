from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from lumina.core.exceptions import UserNotFound
from lumina.middleware.is_logged_in import is_logged_in
from lumina.services.user_services import get_user_by_id, serialize_user

router = APIRouter()


@router.get("/me")
async def get_current_profile(payload: dict = Depends(is_logged_in)):
    user = await get_user_by_id(payload["sub"])
    if user is None:
        raise UserNotFound("User not found")
    return JSONResponse(status_code=200, content={"success": True, "data": serialize_user(user)})


@router.get("/{user_id}")
async def get_profile(user_id: str):
    user = await get_user_by_id(user_id)
    if user is None:
        raise UserNotFound("User not found")

    profile = serialize_user(user)
    # Contact details stay private on public profiles
    profile.pop("phone")
    return JSONResponse(status_code=200, content={"success": True, "data": profile})
