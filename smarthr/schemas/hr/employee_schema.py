from pydantic import BaseModel, ConfigDict, validator, EmailStr
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from smarthr.models.shared.enums import UserRole, EmploymentType

class EmployeeBase(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    name_eng: Optional[str] = None
    birth_date: Optional[date] = None
    phone_number: Optional[str] = None
    hire_date: date
    employment_type: Optional[EmploymentType] = EmploymentType.FULL_TIME
    current_salary: Optional[Decimal] = None
    
    model_config = ConfigDict(from_attributes=True)

class EmployeeCreate(EmployeeBase):
    employee_code: Optional[str] = None
    password: str
    user_role: UserRole = UserRole.EMPLOYEE
    company_id: int
    sub_company_id: int
    department_id: int
    position_id: int

    @validator('first_name', 'last_name')
    def validate_names(cls, v):
        if not v or not v.strip():
            raise ValueError('Name is required')
        return v.strip()
    
    @validator('hire_date')
    def validate_hire_date(cls, v):
        if v > date.today():
            raise ValueError('Hire date cannot be in the future')
        return v

    @validator('employee_code')
    def validate_employee_code(cls, v):
        if v is not None:
            v = v.strip().upper()
            if not v:
                return None
        return v

class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    name_eng: Optional[str] = None
    birth_date: Optional[date] = None
    phone_number: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    current_salary: Optional[Decimal] = None
    user_role: Optional[UserRole] = None

    @validator('first_name', 'last_name')
    def validate_names(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be blank')
        return v.strip() if v else v

class EmployeeResponse(EmployeeBase):
    id: int
    employee_code: str
    user_role: UserRole
    company_id: int
    sub_company_id: int
    department_id: int
    position_id: int
    retire_date: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    account_locked: bool = False
    is_active: bool
    created_at: Optional[datetime] = None

class EmployeeDetailResponse(EmployeeResponse):
    company_name: Optional[str] = None
    sub_company_name: Optional[str] = None
    department_name: Optional[str] = None
    position_name: Optional[str] = None
