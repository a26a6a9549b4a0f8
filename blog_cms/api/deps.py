from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog_cms.auth import verify_token
from blog_cms.config import Settings
from blog_cms.exceptions import AuthenticationError
from blog_cms.models import AuthUser
from blog_cms.scheduling import PublishingScheduler
from blog_cms.storage import PostStore

# Cookie name for auth token
COOKIE_NAME = "auth-token"

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> PostStore:
    return request.app.state.store


def get_scheduler(request: Request) -> PublishingScheduler:
    return request.app.state.scheduler


def get_token_from_request(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None
) -> Optional[str]:
    """
    Extract token from Authorization header or cookie.
    Priority: Header > Cookie
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(COOKIE_NAME)


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings_dep),
) -> Optional[AuthUser]:
    """Editor identity if the request carries a valid token, else None."""
    token = get_token_from_request(request, credentials)
    return verify_token(token, settings)


def get_current_user(user: Optional[AuthUser] = Depends(get_optional_user)) -> AuthUser:
    """Require an editor identity."""
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user
