from pydantic import BaseModel, validator
from typing import List, Optional
from datetime import date
from smarthr.models.shared.enums import DocumentStatus, VacationType

class VacationRequestCreate(BaseModel):
    vacation_type: VacationType
    start_date: date
    end_date: date
    days: float
    reason: str

    @validator('end_date')
    def validate_end_date(cls, v, values):
        start = values.get('start_date')
        if start is not None and v < start:
            raise ValueError('End date cannot be before start date')
        return v

    @validator('days')
    def validate_days(cls, v):
        if v <= 0 or v > 365:
            raise ValueError('Days must be greater than 0 and at most 365')
        return v

    @validator('reason')
    def validate_reason(cls, v):
        if not v or not v.strip():
            raise ValueError('Reason is required')
        return v.strip()

class VacationRequestResponse(BaseModel):
    document_id: int
    document_no: str
    title: str
    requester_id: int
    requester_name: Optional[str] = None
    department_id: Optional[int] = None
    vacation_type: VacationType
    start_date: date
    end_date: date
    days: float
    reason: Optional[str] = None
    status: DocumentStatus
    current_level: int
    total_level: int

class AnnualLeaveBalance(BaseModel):
    year: int
    total_days: float
    used_days: float
    remaining_days: float

class TeamVacationStatus(BaseModel):
    start_date: date
    end_date: date
    department_id: Optional[int] = None
    requests: List[VacationRequestResponse]
