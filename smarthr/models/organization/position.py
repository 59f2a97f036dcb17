from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from smarthr.db.base import BaseModel

class Position(BaseModel):
    __tablename__ = 'positions'
    __table_args__ = (
        UniqueConstraint('department_id', 'pos_code', name='uq_position_code'),
    )
    
    department_id = Column(Integer, ForeignKey('departments.id'), nullable=False, index=True)
    pos_code = Column(String(20), nullable=False)
    pos_name = Column(String(100), nullable=False)
    pos_grade = Column(Integer)  # lower is more senior
    is_active = Column(Boolean, default=True)
    
    # Relationships
    department = relationship("Department", back_populates="positions")
