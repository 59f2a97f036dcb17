from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel
from smarthr.models.shared.enums import ApprovalLineStatus

class ApprovalLine(BaseModel):
    __tablename__ = 'approval_lines'
    __table_args__ = (
        UniqueConstraint('document_id', 'approval_level', name='uq_approval_line_level'),
    )
    
    document_id = Column(Integer, ForeignKey('approval_documents.id'), nullable=False, index=True)
    approval_level = Column(Integer, nullable=False)
    approver_role = Column(String(50), nullable=False)
    approver_employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    status = Column(SQLEnum(ApprovalLineStatus), nullable=False, default=ApprovalLineStatus.PENDING)
    approval_date = Column(DateTime(timezone=True))
    approval_comment = Column(Text)
    
    # Relationships
    document = relationship("ApprovalDocument", back_populates="lines")
    approver = relationship("Employee", foreign_keys=[approver_employee_id])
