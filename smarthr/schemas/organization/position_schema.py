from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime

class PositionBase(BaseModel):
    department_id: int
    pos_code: str
    pos_name: str
    pos_grade: Optional[int] = None

class PositionCreate(PositionBase):
    @validator('pos_code')
    def validate_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Position code is required')
        return v.strip().upper()

    @validator('pos_name')
    def validate_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Position name must be at least 2 characters')
        return v.strip()

class PositionUpdate(BaseModel):
    pos_name: Optional[str] = None
    pos_grade: Optional[int] = None
    is_active: Optional[bool] = None

    @validator('pos_name')
    def validate_name(cls, v):
        if v is not None and len(v.strip()) < 2:
            raise ValueError('Position name must be at least 2 characters')
        return v.strip() if v else v

class PositionResponse(PositionBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
