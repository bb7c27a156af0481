from fastapi import APIRouter, BackgroundTasks, Depends

from lumina.models.allModel import LoginRequest, RegisterRequest, ResetPasswordRequest, SendCodeRequest
from lumina.services.auth_services.auth import login_user, register_user, reset_user_password, send_code
from lumina.services.verification_codes import VerificationCodeService, get_code_service

router = APIRouter()


@router.post("/code/send")
async def send_verification_code(
    request: SendCodeRequest,
    background_tasks: BackgroundTasks,
    service: VerificationCodeService = Depends(get_code_service),
):
    return await send_code(request, service, background_tasks)


@router.post("/login")
async def login(request: LoginRequest, service: VerificationCodeService = Depends(get_code_service)):
    return await login_user(request, service)


@router.post("/register")
async def register(request: RegisterRequest, service: VerificationCodeService = Depends(get_code_service)):
    return await register_user(request, service)


@router.post("/reset-password")
async def reset_password(request: ResetPasswordRequest, service: VerificationCodeService = Depends(get_code_service)):
    return await reset_user_password(request, service)


@router.post("/logout")
async def logout():
    return {"success": True, "message": "Logout successful"}
