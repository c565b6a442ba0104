"""lm_account REST API — balance, withdraw, withdrawal history. All require JWT."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_account.application.schemas import WithdrawRequest
from src.lm_account.application.service import AccountApplicationService
from src.lm_common.database import get_db_session
from src.lm_common.response import ApiResponse, success_response
from src.lm_gateway.auth.dependencies import get_current_user
from src.lm_gateway.user.db_models import UserModel

router = APIRouter(tags=["balance"])

_service = AccountApplicationService()


@router.get("/balance")
async def get_balance(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, str(current_user.id))
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/balance/withdraw")
async def withdraw(
    body: WithdrawRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.withdraw(db, str(current_user.id), body.order, body.sum)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/withdrawals", response_model=None)
async def list_withdrawals(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse | Response:
    items = await _service.list_withdrawals(db, str(current_user.id))
    if not items:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    resp = success_response([item.model_dump() for item in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
