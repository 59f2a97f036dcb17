from sqlalchemy import Column, String, Boolean, Text
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel

class Company(BaseModel):
    __tablename__ = 'companies'
    
    company_code = Column(String(20), nullable=False, unique=True, index=True)
    company_name = Column(String(100), nullable=False)
    company_name_eng = Column(String(100))
    business_number = Column(String(20))
    ceo_name = Column(String(50))
    address = Column(Text)
    phone_number = Column(String(20))
    is_active = Column(Boolean, default=True)
    
    # Relationships
    sub_companies = relationship("SubCompany", back_populates="company")
