# =============================================================================
# User API Routes
# =============================================================================
#
# Endpoints:
#   POST   /users           - Create account (token in auth header)
#   POST   /users/login     - Open a new session (token in auth header)
#   GET    /users/me        - Get current user
#   DELETE /users/me/token  - Log out the current session only
#
# =============================================================================

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from tasklist.auth.dependencies import get_user_directory, require_auth
from tasklist.auth.resolver import AuthContext
from tasklist.core.errors import AuthError
from tasklist.core.models import UserResponse
from tasklist.services.users import UserDirectory

router = APIRouter(prefix="/users", tags=["users"])


# =============================================================================
# Request Models
# =============================================================================

class CredentialsRequest(BaseModel):
    email: str
    password: str


def _send_token(request: Request, response: Response, token: str) -> None:
    response.headers[request.app.state.settings.auth_header] = token


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("", response_model=UserResponse)
async def register(
    data: CredentialsRequest,
    request: Request,
    response: Response,
    users: UserDirectory = Depends(get_user_directory),
):
    """
    Create a new account.

    The first session token is returned in the auth header.
    """
    user, token = await users.register(data.email, data.password)
    _send_token(request, response, token)
    return UserResponse.from_user(user)


@router.post("/login", response_model=UserResponse)
async def login(
    data: CredentialsRequest,
    request: Request,
    response: Response,
    users: UserDirectory = Depends(get_user_directory),
):
    """
    Authenticate and open a new session.

    Unknown email and wrong password give the same answer.
    """
    try:
        user, token = await users.login(data.email, data.password)
    except AuthError:
        raise HTTPException(status_code=400, detail="invalid_credentials")

    _send_token(request, response, token)
    return UserResponse.from_user(user)


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.get("/me", response_model=UserResponse)
async def get_current_user(ctx: AuthContext = Depends(require_auth)):
    """
    Get the current authenticated user.
    """
    return UserResponse.from_user(ctx.user)


@router.delete("/me/token")
async def logout(
    ctx: AuthContext = Depends(require_auth),
    users: UserDirectory = Depends(get_user_directory),
):
    """
    Revoke the session used for this request. Other sessions stay valid.
    """
    await users.logout(ctx.user, ctx.session_token)
    return Response(status_code=200)
