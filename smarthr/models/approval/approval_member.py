from sqlalchemy import Column, Integer, Boolean, ForeignKey, String
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel

class ApprovalMember(BaseModel):
    """Person acting for an approval-line role token"""
    __tablename__ = 'approval_members'
    
    role_code = Column(String(50), nullable=False, index=True)  # HR_TEAM, HR_MANAGER, CEO, etc.
    employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False)
    department_id = Column(Integer, ForeignKey('departments.id'), nullable=True)  # NULL = company-wide
    added_by = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True)
    
    # Relationships
    employee = relationship("Employee", foreign_keys=[employee_id])
    department = relationship("Department", foreign_keys=[department_id])
