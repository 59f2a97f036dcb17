from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel

class SubCompany(BaseModel):
    __tablename__ = 'sub_companies'
    __table_args__ = (
        UniqueConstraint('company_id', 'sub_company_code', name='uq_sub_company_code'),
    )
    
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=False, index=True)
    sub_company_code = Column(String(20), nullable=False)
    sub_company_name = Column(String(100), nullable=False)
    address = Column(Text)
    is_headquarters = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    
    # Relationships
    company = relationship("Company", back_populates="sub_companies")
    departments = relationship("Department", back_populates="sub_company")
