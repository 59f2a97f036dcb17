from pydantic import BaseModel, ConfigDict, validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from smarthr.models.shared.enums import (
    ApprovalAction, ApprovalHistoryAction, ApprovalLineStatus, DocumentStatus
)

class ApprovalDocumentCreate(BaseModel):
    form_id: int
    title: str
    content: Dict[str, Any]

    @validator('title')
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError('Title is required')
        if len(v.strip()) > 200:
            raise ValueError('Title must be 200 characters or fewer')
        return v.strip()

class ApprovalProcessRequest(BaseModel):
    action: ApprovalAction
    comment: Optional[str] = None

    @validator('action', pre=True)
    def normalize_action(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @validator('comment')
    def validate_comment(cls, v):
        if v is not None and len(v) > 1000:
            raise ValueError('Comment must be 1000 characters or fewer')
        return v

class ApprovalLineResponse(BaseModel):
    id: int
    approval_level: int
    approver_role: str
    approver_employee_id: int
    approver_name: Optional[str] = None
    status: ApprovalLineStatus
    approval_date: Optional[datetime] = None
    approval_comment: Optional[str] = None
    
    model_config = ConfigDict(from_attributes=True)

class ApprovalHistoryResponse(BaseModel):
    id: int
    line_id: Optional[int] = None
    approval_level: int
    action_type: ApprovalHistoryAction
    action_by: int
    action_date: datetime
    previous_status: Optional[DocumentStatus] = None
    new_status: DocumentStatus
    comment: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class ApprovalDocumentResponse(BaseModel):
    id: int
    document_no: str
    form_id: int
    form_code: Optional[str] = None
    form_name: Optional[str] = None
    title: str
    content: Dict[str, Any]
    requester_id: int
    requester_name: Optional[str] = None
    requester_department_id: Optional[int] = None
    current_status: DocumentStatus
    current_level: int
    total_level: int
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    
    model_config = ConfigDict(from_attributes=True)

class ApprovalDocumentDetailResponse(ApprovalDocumentResponse):
    lines: List[ApprovalLineResponse] = []
    histories: List[ApprovalHistoryResponse] = []
