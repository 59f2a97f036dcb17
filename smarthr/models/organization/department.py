from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel

class Department(BaseModel):
    __tablename__ = 'departments'
    __table_args__ = (
        UniqueConstraint('sub_company_id', 'dept_code', name='uq_department_code'),
    )
    
    sub_company_id = Column(Integer, ForeignKey('sub_companies.id'), nullable=False, index=True)
    parent_department_id = Column(Integer, ForeignKey('departments.id'), nullable=True)
    dept_code = Column(String(20), nullable=False)
    dept_name = Column(String(100), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, default=True)
    
    # Relationships
    sub_company = relationship("SubCompany", back_populates="departments")
    positions = relationship("Position", back_populates="department")
    employees = relationship("Employee", back_populates="department")
