import logging
from datetime import date, datetime, timezone
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smarthr.core.security import get_password_hash
from smarthr.models.approval.approval_form import ApprovalForm
from smarthr.models.approval.approval_member import ApprovalMember
from smarthr.models.hr.employee import Employee
from smarthr.models.organization.company import Company
from smarthr.models.organization.department import Department
from smarthr.models.organization.position import Position
from smarthr.models.organization.sub_company import SubCompany
from smarthr.models.shared.enums import EmploymentType, UserRole

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@smarthr.local"
ADMIN_PASSWORD = "Admin@12345"

APPROVAL_FORMS: List[Dict] = [
    {
        "form_code": "VACATION", "form_name": "Vacation Request", "category_code": "HR",
        "required_fields": "vacationType,startDate,endDate,days,reason",
        "auto_approval_line": "DEPT_MANAGER,HR_MANAGER",
    },
    {
        "form_code": "ASSIGNMENT", "form_name": "Personnel Assignment", "category_code": "HR",
        "required_fields": "employeeId,reason",
        "auto_approval_line": "DEPT_MANAGER,HR_TEAM,HR_MANAGER",
    },
    {
        "form_code": "EXPENSE", "form_name": "Expense Claim", "category_code": "FINANCE",
        "required_fields": "amount,purpose",
        "auto_approval_line": "DEPT_MANAGER,FINANCE_MANAGER",
    },
    {
        "form_code": "PURCHASE", "form_name": "Purchase Request", "category_code": "FINANCE",
        "required_fields": "itemName,quantity,amount",
        "auto_approval_line": "DEPT_MANAGER,FINANCE_MANAGER,CEO",
    },
    {
        "form_code": "BUSINESS_TRIP", "form_name": "Business Trip", "category_code": "GENERAL",
        "required_fields": "destination,startDate,endDate,purpose",
        "auto_approval_line": "DEPT_MANAGER,HR_MANAGER",
    },
    {
        "form_code": "TRAINING", "form_name": "Training Request", "category_code": "HR",
        "required_fields": "courseName,startDate,endDate",
        "auto_approval_line": "DEPT_MANAGER,HR_TEAM",
    },
]

async def create_initial_data(session: AsyncSession):
    """Create initial data for the application"""
    try:
        logger.info("Creating initial data...")

        await create_approval_forms(session)
        position = await create_default_organization(session)
        admin = await create_admin_employee(session, position)
        await register_admin_approvals(session, admin)

        await session.commit()
        logger.info("Initial data created successfully")
        return True
    except Exception as e:
        logger.error(f"Error creating initial data: {e}")
        await session.rollback()
        raise

async def create_approval_forms(session: AsyncSession):
    for order, form_data in enumerate(APPROVAL_FORMS, start=1):
        existing = await session.scalar(
            select(ApprovalForm).where(ApprovalForm.form_code == form_data["form_code"])
        )
        if existing:
            continue

        session.add(ApprovalForm(
            max_approval_level=len(form_data["auto_approval_line"].split(",")),
            display_order=order,
            is_active=True,
            **form_data
        ))
        logger.info(f"Created approval form: {form_data['form_code']}")

async def create_default_organization(session: AsyncSession) -> Position:
    """Company HQ -> head office -> administration -> administrator"""
    company = await session.scalar(select(Company).where(Company.company_code == "HQ"))
    if not company:
        company = Company(company_code="HQ", company_name="Head Company", is_active=True)
        session.add(company)
        await session.flush()
        logger.info("Created default company: HQ")

    sub_company = await session.scalar(
        select(SubCompany).where(SubCompany.company_id == company.id, SubCompany.sub_company_code == "HO")
    )
    if not sub_company:
        sub_company = SubCompany(
            company_id=company.id, sub_company_code="HO", sub_company_name="Head Office",
            is_headquarters=True, is_active=True
        )
        session.add(sub_company)
        await session.flush()

    department = await session.scalar(
        select(Department).where(Department.sub_company_id == sub_company.id, Department.dept_code == "ADMIN")
    )
    if not department:
        department = Department(
            sub_company_id=sub_company.id, dept_code="ADMIN", dept_name="Administration", is_active=True
        )
        session.add(department)
        await session.flush()

    position = await session.scalar(
        select(Position).where(Position.department_id == department.id, Position.pos_code == "ADM")
    )
    if not position:
        position = Position(
            department_id=department.id, pos_code="ADM", pos_name="Administrator", pos_grade=1, is_active=True
        )
        session.add(position)
        await session.flush()

    return position

async def create_admin_employee(session: AsyncSession, position: Position) -> Employee:
    admin = await session.scalar(select(Employee).where(Employee.email == ADMIN_EMAIL))
    if admin:
        return admin

    department = await session.get(Department, position.department_id)
    sub_company = await session.get(SubCompany, department.sub_company_id)

    admin = Employee(
        employee_code="ADMIN0001",
        email=ADMIN_EMAIL,
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        first_name="System",
        last_name="Administrator",
        hire_date=date.today(),
        employment_type=EmploymentType.FULL_TIME,
        user_role=UserRole.ADMIN,
        company_id=sub_company.company_id,
        sub_company_id=sub_company.id,
        department_id=department.id,
        position_id=position.id,
        password_changed_at=datetime.now(timezone.utc),
        is_active=True
    )
    session.add(admin)
    await session.flush()
    logger.info(f"Created administrator: {ADMIN_EMAIL}")
    return admin

async def register_admin_approvals(session: AsyncSession, admin: Employee):
    """Make the administrator the company-wide approver for every non-department role"""
    role_codes = set()
    for form_data in APPROVAL_FORMS:
        role_codes.update(r for r in form_data["auto_approval_line"].split(",") if r != "DEPT_MANAGER")

    for role_code in sorted(role_codes):
        existing = await session.scalar(
            select(ApprovalMember).where(
                ApprovalMember.role_code == role_code,
                ApprovalMember.employee_id == admin.id,
                ApprovalMember.department_id.is_(None)
            )
        )
        if existing:
            continue
        session.add(ApprovalMember(
            role_code=role_code, employee_id=admin.id, department_id=None, added_by=admin.id, is_active=True
        ))
