from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime

class DepartmentBase(BaseModel):
    sub_company_id: int
    dept_code: str
    dept_name: str
    parent_department_id: Optional[int] = None
    description: Optional[str] = None

class DepartmentCreate(DepartmentBase):
    @validator('dept_code')
    def validate_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Department code is required')
        return v.strip().upper()

    @validator('dept_name')
    def validate_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Department name must be at least 2 characters')
        return v.strip()

class DepartmentUpdate(BaseModel):
    dept_name: Optional[str] = None
    parent_department_id: Optional[int] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @validator('dept_name')
    def validate_name(cls, v):
        if v is not None and len(v.strip()) < 2:
            raise ValueError('Department name must be at least 2 characters')
        return v.strip() if v else v

class DepartmentResponse(DepartmentBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
