from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel
from smarthr.models.shared.enums import ApprovalHistoryAction, DocumentStatus

class ApprovalHistory(BaseModel):
    """Append-only audit trail of document actions"""
    __tablename__ = 'approval_histories'
    
    document_id = Column(Integer, ForeignKey('approval_documents.id'), nullable=False, index=True)
    line_id = Column(Integer, ForeignKey('approval_lines.id'))
    approval_level = Column(Integer, nullable=False, default=0)
    action_type = Column(SQLEnum(ApprovalHistoryAction), nullable=False)
    action_by = Column(Integer, ForeignKey('employees.id'), nullable=False)
    action_date = Column(DateTime(timezone=True), nullable=False)
    previous_status = Column(SQLEnum(DocumentStatus))
    new_status = Column(SQLEnum(DocumentStatus), nullable=False)
    comment = Column(Text)
    ip_address = Column(String(50))
    user_agent = Column(String(500))
    
    # Relationships
    document = relationship("ApprovalDocument", back_populates="histories")
    actor = relationship("Employee", foreign_keys=[action_by])
