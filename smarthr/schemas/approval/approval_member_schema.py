from pydantic import BaseModel, ConfigDict, validator
from typing import Optional
from datetime import datetime

class ApprovalMemberCreate(BaseModel):
    role_code: str
    employee_id: int
    department_id: Optional[int] = None

    @validator('role_code')
    def validate_role_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Role code is required')
        return v.strip().upper()

class ApprovalMemberResponse(BaseModel):
    id: int
    role_code: str
    employee_id: int
    employee_name: Optional[str] = None
    department_id: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None
    
    model_config = ConfigDict(from_attributes=True)
