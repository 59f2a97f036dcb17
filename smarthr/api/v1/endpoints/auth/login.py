from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from smarthr.api.dependencies import get_current_user
from smarthr.core.database import get_async_session
from smarthr.core.request_context import get_request_context
from smarthr.models.hr.employee import Employee
from smarthr.schemas.auth.login import ChangePasswordRequest, LoginRequest, RefreshTokenRequest
from smarthr.schemas.auth.token import AccessTokenResponse, TokenResponse
from smarthr.schemas.common.message import MessageResponse
from smarthr.schemas.hr.employee_schema import EmployeeDetailResponse
from smarthr.services.auth.auth_service import AuthService
from smarthr.services.hr.employee_service import EmployeeService

router = APIRouter()

@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_async_session)
):
    """Authenticate with email and password"""
    ctx = get_request_context(request)
    service = AuthService(session)
    return await service.login(credentials.email, credentials.password, ip_address=ctx["ip_address"])

@router.get("/me", response_model=EmployeeDetailResponse)
async def get_me(
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get the authenticated employee's profile"""
    service = EmployeeService(session)
    return await service.get_employee(current_user.id, current_user)

@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh_token(
    data: RefreshTokenRequest,
    session: AsyncSession = Depends(get_async_session)
):
    """Issue a new access token from a refresh token"""
    service = AuthService(session)
    return await service.refresh_access_token(data.refresh_token)

@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: Employee = Depends(get_current_user)):
    """Tokens are stateless; the client discards them"""
    return MessageResponse(message="Logged out successfully")

@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    service = AuthService(session)
    await service.change_password(current_user, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")
