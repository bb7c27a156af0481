import logging
from typing import Optional

from fastapi import BackgroundTasks
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError

from lumina.core.config import settings
from lumina.core.exceptions import (
    InvalidCredentials,
    LuminaError,
    UserAlreadyExists,
    UserNotFound,
)
from lumina.models.allModel import LoginRequest, RegisterRequest, ResetPasswordRequest, SendCodeRequest
from lumina.models.identifier import Identifier
from lumina.services.user_services import (
    create_user,
    get_user_by_identifier,
    serialize_user,
    set_password,
)
from lumina.services.verification_codes import VerificationCodeService
from lumina.utils.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


def _session_response(user, message: str) -> JSONResponse:
    access_token = create_access_token({"sub": str(user.id)})

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": message,
            "data": {
                "user": serialize_user(user),
                "access_token": access_token,
                "token_type": "bearer"
            }
        }
    )


async def send_code(
    request: SendCodeRequest,
    service: VerificationCodeService,
    background_tasks: Optional[BackgroundTasks] = None,
):
    identifier = Identifier.parse(request.identifier, request.channel)

    user = await get_user_by_identifier(identifier)
    if request.purpose in ("login", "reset") and user is None:
        raise UserNotFound()
    if request.purpose == "register" and user is not None:
        raise UserAlreadyExists()

    issued = await service.issue(identifier, request.purpose, background_tasks)

    data = {
        "cooldown_seconds": issued.cooldown_seconds,
        "expires_at": issued.expires_at.isoformat() + "Z",
    }
    if settings.EXPOSE_VERIFICATION_CODE:
        data["code"] = issued.code

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Verification code sent",
            "data": data
        }
    )


async def login_user(request: LoginRequest, service: VerificationCodeService):
    identifier = Identifier.parse(request.identifier)

    if request.method == "password":
        if not request.password:
            raise LuminaError("Please enter your password")

        user = await get_user_by_identifier(identifier)
        if not user or not user.password or not verify_password(request.password, user.password):
            logger.info("Password login failed for %s", identifier.masked())
            raise InvalidCredentials()
    else:
        if not request.code:
            raise LuminaError("Please enter the verification code")

        await service.consume(identifier, "login", request.code)
        user = await get_user_by_identifier(identifier)
        if user is None:
            raise UserNotFound()

    logger.info("User %s logged in via %s", user.id, request.method)
    return _session_response(user, "User logged in successfully")


async def register_user(request: RegisterRequest, service: VerificationCodeService):
    identifier = Identifier.parse(request.identifier)

    # Checked before redeeming so a duplicate signup does not burn the code
    if await get_user_by_identifier(identifier) is not None:
        raise UserAlreadyExists()

    await service.consume(identifier, "register", request.code)

    contact_email = None
    if request.email and not identifier.is_email:
        contact_email = str(request.email).lower()

    try:
        user = await create_user(
            name=request.name.strip(),
            identifier=identifier,
            password_hash=get_password_hash(request.password) if request.password else None,
            email=contact_email,
        )
    except DuplicateKeyError:
        raise UserAlreadyExists()

    logger.info("Registered user %s via %s", user.id, identifier.channel)
    return _session_response(user, "User registered successfully")


async def reset_user_password(request: ResetPasswordRequest, service: VerificationCodeService):
    identifier = Identifier.parse(request.identifier)

    user = await get_user_by_identifier(identifier)
    if user is None:
        raise UserNotFound()

    await service.consume(identifier, "reset", request.code)
    await set_password(user, get_password_hash(request.new_password))

    logger.info("Password reset for user %s", user.id)
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "Password reset successfully"
        }
    )
