import logging
from fastapi import APIRouter, Depends, Query, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from smarthr.api.dependencies import get_current_user, require_admin
from smarthr.core.config import settings
from smarthr.core.database import get_async_session
from smarthr.core.request_context import get_request_context
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import DocumentStatus
from smarthr.schemas.common.message import MessageResponse
from smarthr.schemas.common.pagination import PaginatedResponse
from smarthr.schemas.approval.approval_document_schema import (
    ApprovalDocumentCreate,
    ApprovalDocumentDetailResponse,
    ApprovalDocumentResponse,
    ApprovalProcessRequest
)
from smarthr.schemas.approval.approval_form_schema import ApprovalFormCreate, ApprovalFormResponse
from smarthr.schemas.approval.approval_member_schema import ApprovalMemberCreate, ApprovalMemberResponse
from smarthr.services.approval.approval_service import ApprovalService

router = APIRouter()
logger = logging.getLogger(__name__)

# region ========== Approval Forms ==========

@router.get("/forms", response_model=List[ApprovalFormResponse])
async def get_approval_forms(
    include_inactive: bool = Query(False),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get approval forms"""
    service = ApprovalService(session)
    return await service.get_forms(include_inactive=include_inactive)

@router.post("/forms", response_model=ApprovalFormResponse, status_code=status.HTTP_201_CREATED)
async def create_approval_form(
    form: ApprovalFormCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin)
):
    """Create an approval form (admin only)"""
    service = ApprovalService(session)
    return await service.create_form(form, current_user.id)

@router.post("/forms/{form_id}/deactivate", response_model=ApprovalFormResponse)
async def deactivate_approval_form(
    form_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin)
):
    """Deactivate an approval form (admin only)"""
    service = ApprovalService(session)
    return await service.deactivate_form(form_id, current_user.id)

# endregion

# region ========== Approval Members ==========

@router.get("/members", response_model=PaginatedResponse[ApprovalMemberResponse])
async def get_approval_members(
    role_code: Optional[str] = Query(None, description="Filter by approval-line role"),
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin)
):
    service = ApprovalService(session)
    return await service.get_approval_members(page_index, page_size, role_code)

@router.post("/members", response_model=ApprovalMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_approval_member(
    member: ApprovalMemberCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin)
):
    """Register an employee as approver for a role"""
    service = ApprovalService(session)
    return await service.add_approval_member(member, current_user.id)

@router.delete("/members/{member_id}", response_model=MessageResponse)
async def remove_approval_member(
    member_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(require_admin)
):
    service = ApprovalService(session)
    await service.remove_approval_member(member_id, current_user.id)
    return MessageResponse(message="Approval member removed successfully")

# endregion

# region ========== Approval Documents ==========

@router.post("/documents", response_model=ApprovalDocumentDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_approval_document(
    document: ApprovalDocumentCreate,
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Submit a document; the approval line is generated from the form"""
    ctx = get_request_context(request)
    service = ApprovalService(session)
    return await service.create_document(
        form_id=document.form_id,
        title=document.title,
        content=document.content,
        requester_id=current_user.id,
        ip_address=ctx["ip_address"],
        user_agent=ctx["user_agent"]
    )

@router.get("/documents/{document_id}", response_model=ApprovalDocumentDetailResponse)
async def get_approval_document(
    document_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Get document with approval line and history"""
    service = ApprovalService(session)
    return await service.get_document(document_id, current_user)

@router.post("/documents/{document_id}/process", response_model=ApprovalDocumentDetailResponse)
async def process_approval_document(
    action: ApprovalProcessRequest,
    request: Request,
    document_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Approve or reject the document at the current level"""
    ctx = get_request_context(request)
    service = ApprovalService(session)
    return await service.process_approval(
        document_id=document_id,
        approver_id=current_user.id,
        action=action.action.value,
        comment=action.comment,
        ip_address=ctx["ip_address"],
        user_agent=ctx["user_agent"]
    )

@router.get("/pending", response_model=PaginatedResponse[ApprovalDocumentResponse])
async def get_pending_documents(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Documents waiting for the current user's decision"""
    service = ApprovalService(session)
    return await service.get_pending_documents(current_user.id, page_index, page_size)

@router.get("/my-documents", response_model=PaginatedResponse[ApprovalDocumentResponse])
async def get_my_documents(
    status: Optional[DocumentStatus] = Query(None, description="Filter by document status"),
    page_index: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_async_session),
    current_user: Employee = Depends(get_current_user)
):
    """Documents submitted by the current user"""
    service = ApprovalService(session)
    return await service.get_my_documents(current_user.id, status, page_index, page_size)

# endregion
