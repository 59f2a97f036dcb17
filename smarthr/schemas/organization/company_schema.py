from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime

class CompanyBase(BaseModel):
    company_code: str
    company_name: str
    company_name_eng: Optional[str] = None
    business_number: Optional[str] = None
    ceo_name: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None

class CompanyCreate(CompanyBase):
    @validator('company_code')
    def validate_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Company code is required')
        return v.strip().upper()

    @validator('company_name')
    def validate_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Company name must be at least 2 characters')
        return v.strip()

class CompanyUpdate(BaseModel):
    company_name: Optional[str] = None
    company_name_eng: Optional[str] = None
    business_number: Optional[str] = None
    ceo_name: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: Optional[bool] = None

    @validator('company_name')
    def validate_name(cls, v):
        if v is not None and len(v.strip()) < 2:
            raise ValueError('Company name must be at least 2 characters')
        return v.strip() if v else v

class CompanyResponse(CompanyBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
