"""Auth API router: register, login.

Both endpoints return ApiResponse with a Bearer access token. request_id is
read from request.state (injected by RequestLogMiddleware).
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.lm_common.database import get_db_session
from src.lm_common.response import ApiResponse, success_response
from src.lm_gateway.user.db_models import UserModel
from src.lm_gateway.user.schemas import CredentialsRequest, TokenResponse
from src.lm_gateway.user.service import UserService

router = APIRouter(tags=["auth"])
_service = UserService()


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _token_response(user: UserModel, token: str) -> TokenResponse:
    return TokenResponse(
        user_id=str(user.id),
        login=user.login,
        access_token=token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )


@router.post(
    "/register",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user, token = await _service.register(body.login, body.password, db)

    resp = success_response(_token_response(user, token).model_dump(), "User registered successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: CredentialsRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, token = await _service.login(body.login, body.password, db)

    resp = success_response(_token_response(user, token).model_dump(), "Login successful")
    resp.request_id = _get_request_id(request)
    return resp
