from fastapi import APIRouter
from smarthr.api.v1.endpoints.auth import login
from smarthr.api.v1.endpoints.hr import assignments, employees
from smarthr.api.v1.endpoints.organization import companies, departments, positions, sub_companies, tree
from smarthr.api.v1.endpoints.approval import approvals
from smarthr.api.v1.endpoints.vacation import vacation

api_router = APIRouter()

# Authentication routes
api_router.include_router(login.router, prefix="/auth", tags=["Authentication"])

# Organization routes
api_router.include_router(tree.router, prefix="/organization", tags=["Organization"])
api_router.include_router(companies.router, prefix="/organization/companies", tags=["Organization"])
api_router.include_router(sub_companies.router, prefix="/organization/subcompanies", tags=["Organization"])
api_router.include_router(departments.router, prefix="/organization/departments", tags=["Organization"])
api_router.include_router(positions.router, prefix="/organization/positions", tags=["Organization"])

# HR routes
api_router.include_router(employees.router, prefix="/employees", tags=["Human Resource"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["Human Resource"])

# Approval routes
api_router.include_router(approvals.router, prefix="/approval", tags=["Approval"])
api_router.include_router(vacation.router, prefix="/vacation", tags=["Vacation"])
