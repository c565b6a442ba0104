# src/lm_order/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.database import get_db_session
from src.lm_common.enums import AdmissionResult
from src.lm_common.response import ApiResponse, success_response
from src.lm_gateway.auth.dependencies import get_current_user
from src.lm_gateway.user.db_models import UserModel
from src.lm_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()


@router.post("", response_model=ApiResponse, status_code=status.HTTP_202_ACCEPTED)
async def submit_order(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    response: Response,
) -> ApiResponse:
    """Body is the bare order number as text/plain."""
    if not request.headers.get("content-type", "").startswith("text/plain"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Expected text/plain body")
    raw_number = (await request.body()).decode("utf-8", errors="replace")

    data = await _service.submit_order(db, str(current_user.id), raw_number)
    if data.result == AdmissionResult.ALREADY_REGISTERED.value:
        response.status_code = status.HTTP_200_OK
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("", response_model=None)
async def list_orders(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse | Response:
    items = await _service.list_orders(db, str(current_user.id))
    if not items:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    resp = success_response([item.model_dump() for item in items])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
