from sqlalchemy import Column, Integer, String, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel

class EmployeeAssignment(BaseModel):
    """Immutable record of one organizational move"""
    __tablename__ = 'employee_assignments'
    
    employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    
    previous_company_id = Column(Integer, ForeignKey('companies.id'))
    previous_sub_company_id = Column(Integer, ForeignKey('sub_companies.id'))
    previous_department_id = Column(Integer, ForeignKey('departments.id'))
    previous_position_id = Column(Integer, ForeignKey('positions.id'))
    
    new_company_id = Column(Integer, ForeignKey('companies.id'), nullable=False)
    new_sub_company_id = Column(Integer, ForeignKey('sub_companies.id'), nullable=False)
    new_department_id = Column(Integer, ForeignKey('departments.id'), nullable=False)
    new_position_id = Column(Integer, ForeignKey('positions.id'), nullable=False)
    
    assignment_type = Column(String(50), nullable=False)
    change_count = Column(Integer, nullable=False)
    effective_date = Column(Date, nullable=False)
    assignment_reason = Column(Text)
    assigned_by = Column(Integer, ForeignKey('employees.id'), nullable=False)
    
    # Relationships
    employee = relationship("Employee", foreign_keys=[employee_id])
    assigner = relationship("Employee", foreign_keys=[assigned_by])
