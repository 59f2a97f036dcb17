from pydantic import BaseModel
from smarthr.schemas.hr.employee_schema import EmployeeResponse

class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class TokenResponse(AccessTokenResponse):
    refresh_token: str
    user: EmployeeResponse
