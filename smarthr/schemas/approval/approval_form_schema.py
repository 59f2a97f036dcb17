from pydantic import BaseModel, ConfigDict, validator
from typing import Any, Dict, List, Optional
from datetime import datetime

class ApprovalFormCreate(BaseModel):
    form_code: str
    form_name: str
    form_name_eng: Optional[str] = None
    category_code: Optional[str] = None
    category_name: Optional[str] = None
    form_template: Optional[Dict[str, Any]] = None
    required_fields: List[str] = []
    approval_line: List[str]
    max_approval_level: int
    display_order: int = 0
    description: Optional[str] = None

    @validator('form_code')
    def validate_form_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Form code is required')
        return v.strip().upper()

    @validator('approval_line')
    def validate_approval_line(cls, v):
        roles = [r.strip().upper() for r in v if r and r.strip()]
        if not roles:
            raise ValueError('Approval line must contain at least one role')
        return roles

    @validator('max_approval_level')
    def validate_max_level(cls, v, values):
        if v < 1:
            raise ValueError('Max approval level must be at least 1')
        line = values.get('approval_line')
        if line is not None and len(line) != v:
            raise ValueError('Max approval level must match the number of approval line roles')
        return v

class ApprovalFormResponse(BaseModel):
    id: int
    form_code: str
    form_name: str
    form_name_eng: Optional[str] = None
    category_code: Optional[str] = None
    category_name: Optional[str] = None
    form_template: Optional[Dict[str, Any]] = None
    required_field_list: List[str] = []
    approval_roles: List[str] = []
    max_approval_level: int
    display_order: Optional[int] = 0
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    
    model_config = ConfigDict(from_attributes=True)
