from pydantic import BaseModel
from typing import List, Optional

class PositionNode(BaseModel):
    id: int
    pos_code: str
    pos_name: str
    pos_grade: Optional[int] = None

class DepartmentNode(BaseModel):
    id: int
    dept_code: str
    dept_name: str
    positions: List[PositionNode] = []

class SubCompanyNode(BaseModel):
    id: int
    sub_company_code: str
    sub_company_name: str
    departments: List[DepartmentNode] = []

class CompanyNode(BaseModel):
    id: int
    company_code: str
    company_name: str
    sub_companies: List[SubCompanyNode] = []
