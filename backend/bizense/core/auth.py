from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bizense.core.errors import IdentityError, IdentityUnavailableError, err
from bizense.core.identity import AuthUser, IdentityClient
from bizense.core.store import CampaignStore
from bizense.db import get_session

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_client(request: Request) -> IdentityClient:
    return request.app.state.context.identity


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    identity: IdentityClient = Depends(get_identity_client),
) -> AuthUser:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "missing_token",
                    "message": "No token provided",
                }
            },
        )
    try:
        return await identity.get_user(credentials.credentials)
    except IdentityError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "invalid_token",
                    "message": e.message,
                }
            },
        ) from e
    except IdentityUnavailableError as e:
        raise err("identity_unavailable", str(e), status_code=500) from e


def get_store(session: AsyncSession = Depends(get_session)) -> CampaignStore:
    return CampaignStore(session)
