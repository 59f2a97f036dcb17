from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel
from smarthr.models.shared.enums import DocumentStatus

class ApprovalDocument(BaseModel):
    __tablename__ = 'approval_documents'
    
    document_no = Column(String(50), nullable=False, unique=True, index=True)
    form_id = Column(Integer, ForeignKey('approval_forms.id'), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(JSON, nullable=False)
    requester_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    requester_department_id = Column(Integer, ForeignKey('departments.id'))
    current_status = Column(SQLEnum(DocumentStatus), nullable=False, default=DocumentStatus.DRAFT)
    current_level = Column(Integer, nullable=False, default=0)
    total_level = Column(Integer, nullable=False)
    processed_at = Column(DateTime(timezone=True))
    
    # Relationships
    form = relationship("ApprovalForm", back_populates="documents")
    requester = relationship("Employee", foreign_keys=[requester_id])
    lines = relationship(
        "ApprovalLine",
        back_populates="document",
        order_by="ApprovalLine.approval_level",
        cascade="all, delete-orphan",
    )
    histories = relationship(
        "ApprovalHistory",
        back_populates="document",
        order_by="ApprovalHistory.id",
    )
