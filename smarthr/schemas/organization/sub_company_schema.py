from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime

class SubCompanyBase(BaseModel):
    company_id: int
    sub_company_code: str
    sub_company_name: str
    address: Optional[str] = None
    is_headquarters: bool = False

class SubCompanyCreate(SubCompanyBase):
    @validator('sub_company_code')
    def validate_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Sub-company code is required')
        return v.strip().upper()

    @validator('sub_company_name')
    def validate_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Sub-company name must be at least 2 characters')
        return v.strip()

class SubCompanyUpdate(BaseModel):
    sub_company_name: Optional[str] = None
    address: Optional[str] = None
    is_headquarters: Optional[bool] = None
    is_active: Optional[bool] = None

    @validator('sub_company_name')
    def validate_name(cls, v):
        if v is not None and len(v.strip()) < 2:
            raise ValueError('Sub-company name must be at least 2 characters')
        return v.strip() if v else v

class SubCompanyResponse(SubCompanyBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
