from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, ForeignKey, Enum as SQLEnum, Date
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel
from smarthr.models.shared.enums import UserRole, EmploymentType

class Employee(BaseModel):
    __tablename__ = 'employees'
    
    employee_code = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    name_eng = Column(String(100))
    birth_date = Column(Date)
    phone_number = Column(String(20))
    hire_date = Column(Date, nullable=False)
    retire_date = Column(DateTime(timezone=True))
    employment_type = Column(SQLEnum(EmploymentType), default=EmploymentType.FULL_TIME)
    current_salary = Column(Numeric(12, 2))
    user_role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.EMPLOYEE)
    
    # Organization placement
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=False, index=True)
    sub_company_id = Column(Integer, ForeignKey('sub_companies.id'), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey('departments.id'), nullable=False, index=True)
    position_id = Column(Integer, ForeignKey('positions.id'), nullable=False, index=True)
    
    # Login security
    last_login_at = Column(DateTime(timezone=True))
    login_fail_count = Column(Integer, nullable=False, default=0)
    account_locked = Column(Boolean, nullable=False, default=False)
    password_changed_at = Column(DateTime(timezone=True))
    
    is_active = Column(Boolean, default=True)
    
    # Relationships
    company = relationship("Company")
    sub_company = relationship("SubCompany")
    department = relationship("Department", back_populates="employees")
    position = relationship("Position")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def org_tuple(self):
        return (self.company_id, self.sub_company_id, self.department_id, self.position_id)
