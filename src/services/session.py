"""Session lookup - bearer token to the calling user via Supabase Auth."""

from typing import Optional
from pydantic import BaseModel
from supabase import AuthError

from src.models.api import ApiRequest
from src.services.supabase_client import SupabaseClient
from src.utils.errors import UnauthorizedError
from src.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


class Session(BaseModel):
    """Authenticated caller."""
    user_id: str
    email: Optional[str] = None


def extract_bearer_token(request: ApiRequest) -> Optional[str]:
    header = request.header("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_session(request: ApiRequest) -> Optional[Session]:
    """
    Resolve the caller's session.

    Returns None for a missing, expired or otherwise rejected token.
    """
    token = extract_bearer_token(request)
    if not token:
        return None

    async with SupabaseClient() as client:
        try:
            response = client.auth.get_user(token)
        except AuthError as e:
            logger.warning("Session token rejected", error=str(e), error_type=type(e).__name__)
            return None

    user = getattr(response, "user", None) if response else None
    if not user or not getattr(user, "id", None):
        return None

    logger.debug("Session resolved", user_id=mask_user_id(str(user.id)))
    return Session(user_id=str(user.id), email=getattr(user, "email", None))


async def require_session(request: ApiRequest) -> Session:
    """Session or UnauthorizedError."""
    session = await get_session(request)
    if session is None:
        raise UnauthorizedError()
    return session
