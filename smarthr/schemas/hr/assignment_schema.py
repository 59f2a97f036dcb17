from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date, datetime

class AssignmentCreate(BaseModel):
    company_id: Optional[int] = None
    sub_company_id: Optional[int] = None
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    effective_date: Optional[date] = None
    assignment_reason: Optional[str] = None

class AssignmentResponse(BaseModel):
    id: int
    employee_id: int
    previous_company_id: Optional[int] = None
    previous_sub_company_id: Optional[int] = None
    previous_department_id: Optional[int] = None
    previous_position_id: Optional[int] = None
    new_company_id: int
    new_sub_company_id: int
    new_department_id: int
    new_position_id: int
    assignment_type: str
    change_count: int
    effective_date: date
    assignment_reason: Optional[str] = None
    assigned_by: int
    created_at: Optional[datetime] = None
    
    model_config = ConfigDict(from_attributes=True)

class AssignmentResult(BaseModel):
    message: str
    assignment: AssignmentResponse
