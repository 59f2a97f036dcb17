from typing import List
from sqlalchemy import Column, Integer, String, Boolean, Text, JSON
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel

def _split_csv(value) -> List[str]:
    return [token.strip() for token in (value or "").split(",") if token.strip()]

class ApprovalForm(BaseModel):
    __tablename__ = 'approval_forms'
    
    form_code = Column(String(50), nullable=False, unique=True, index=True)
    form_name = Column(String(100), nullable=False)
    form_name_eng = Column(String(100))
    category_code = Column(String(50))
    category_name = Column(String(100))
    form_template = Column(JSON)  # field schema rendered by clients
    required_fields = Column(Text)  # comma separated content keys
    auto_approval_line = Column(Text, nullable=False)  # comma separated role tokens
    max_approval_level = Column(Integer, nullable=False, default=5)
    display_order = Column(Integer, default=0)
    description = Column(Text)
    is_active = Column(Boolean, default=True)
    
    # Relationships
    documents = relationship("ApprovalDocument", back_populates="form")

    @property
    def required_field_list(self) -> List[str]:
        return _split_csv(self.required_fields)

    @property
    def approval_roles(self) -> List[str]:
        return _split_csv(self.auto_approval_line)
