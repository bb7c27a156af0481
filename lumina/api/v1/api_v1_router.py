from fastapi import APIRouter

from lumina.api.v1.routes import auth_router, system_router, user_router

api_router = APIRouter()

api_router.include_router(auth_router.router, prefix="/auth", tags=["Auth"])
api_router.include_router(user_router.router, prefix="/user", tags=["User"])
api_router.include_router(system_router.router, prefix="/system", tags=["System Check"])
