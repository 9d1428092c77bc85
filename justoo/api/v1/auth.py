from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Header, Response

from justoo.api.deps import get_auth_service
from justoo.core.errors import AuthError
from justoo.schemas.auth import (
    CustomerInfo,
    ErrorResponse,
    OkResponse,
    SendOtpRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from justoo.services.auth_service import CustomerAuthService, VerifyStatus

router = APIRouter()

VERIFY_ERRORS = {
    VerifyStatus.OTP_EXPIRED: (401, "OTP_EXPIRED"),
    VerifyStatus.OTP_INVALID: (401, "OTP_INVALID"),
    VerifyStatus.TOKEN_FAILED: (500, "TOKEN_CREATE_FAILED"),
    VerifyStatus.FAILED: (500, "LOGIN_FAILED"),
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

@router.post("/send-otp", response_model=OkResponse, responses=ERROR_RESPONSES)
async def send_otp(
    background_tasks: BackgroundTasks,
    payload: Optional[SendOtpRequest] = Body(None),
    service: CustomerAuthService = Depends(get_auth_service)
):
    payload = payload or SendOtpRequest()
    await service.send_otp(payload.phone, background_tasks)
    return OkResponse(ok=True)

@router.post("/verify-otp", response_model=VerifyOtpResponse, responses=ERROR_RESPONSES)
async def verify_otp(
    payload: Optional[VerifyOtpRequest] = Body(None),
    service: CustomerAuthService = Depends(get_auth_service)
):
    payload = payload or VerifyOtpRequest()
    result = await service.verify_otp(payload.phone, payload.otp)
    if result.status is not VerifyStatus.OK:
        status_code, code = VERIFY_ERRORS.get(result.status, (500, "LOGIN_FAILED"))
        raise AuthError(status_code, code)

    return VerifyOtpResponse(
        token=result.token,
        customer=CustomerInfo.model_validate(result.customer)
    )

@router.post("/logout", status_code=204, response_class=Response, responses=ERROR_RESPONSES)
async def logout(
    authorization: Optional[str] = Header(None),
    service: CustomerAuthService = Depends(get_auth_service)
):
    await service.logout(authorization)
    return Response(status_code=204)

@router.post("/revoke", status_code=204, response_class=Response, responses=ERROR_RESPONSES)
async def revoke_token(
    authorization: Optional[str] = Header(None),
    service: CustomerAuthService = Depends(get_auth_service)
):
    await service.logout(authorization)
    return Response(status_code=204)
