"""FastAPI dependencies for caller identity.

get_current_owner_id resolves the bearer token to the owner ID every store
operation is filtered by. It never touches the store, so an unauthenticated
request is rejected before any query runs.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from snipvault.auth.jwt import decode_token
from snipvault.middleware.exceptions import UnauthenticatedError

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_owner_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()

    payload = decode_token(credentials.credentials)
    owner_id: str | None = payload.get("sub")
    if not owner_id or payload.get("type") != "access":
        raise UnauthenticatedError("Invalid or expired token")
    return owner_id
