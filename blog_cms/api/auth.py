import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from blog_cms.api.deps import COOKIE_NAME, get_settings_dep, get_store
from blog_cms.api.schemas import LoginRequest
from blog_cms.auth import authenticate, create_token
from blog_cms.config import Settings
from blog_cms.storage import PostStore

router = APIRouter()
logger = logging.getLogger(__name__)


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    """Set httpOnly auth cookie."""
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=settings.jwt_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    """Clear auth cookie."""
    response.delete_cookie(key=COOKIE_NAME, path="/")


@router.post("/login")
async def login(
    body: LoginRequest,
    store: PostStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
) -> Any:
    if not body.email or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    user = await authenticate(store, body.email, body.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_token(user, settings)
    response = JSONResponse(content={"success": True})
    set_auth_cookie(response, token, settings)
    logger.info("[AUTH] %s logged in", user.email)
    return response


@router.post("/logout")
async def logout() -> Any:
    """Clear auth cookie."""
    response = JSONResponse(content={"success": True})
    clear_auth_cookie(response)
    return response
