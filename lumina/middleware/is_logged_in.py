from typing import Any, Dict

from fastapi import HTTPException, Request

from lumina.utils.security import decode_token


async def is_logged_in(request: Request) -> Dict[str, Any]:
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail={"success": False, "message": "Missing or invalid Authorization header"},
        )

    token = auth_header.split(" ", 1)[1]
    payload = decode_token(token)

    # jose already rejects expired tokens
    if not payload or payload.get("type") != "access" or not payload.get("sub"):
        raise HTTPException(
            status_code=401,
            detail={"success": False, "message": "Invalid or expired token"},
        )

    return payload
