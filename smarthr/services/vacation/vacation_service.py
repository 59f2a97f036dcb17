import calendar
import logging
from typing import Any, Dict, List, Optional, Tuple
from datetime import date
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from smarthr.auth.permissions import PermissionChecker
from smarthr.core.config import settings
from smarthr.core.exceptions import NotFoundError, ValidationError
from smarthr.models.approval.approval_document import ApprovalDocument
from smarthr.models.approval.approval_form import ApprovalForm
from smarthr.models.hr.employee import Employee
from smarthr.models.shared.enums import DocumentStatus, UserRole, VacationType
from smarthr.schemas.vacation.vacation_schema import (
    AnnualLeaveBalance, TeamVacationStatus, VacationRequestCreate, VacationRequestResponse
)
from smarthr.services.approval.approval_service import ApprovalService

logger = logging.getLogger(__name__)

# Requests in these states count against the balance and show on the team calendar
LIVE_STATUSES = (DocumentStatus.PENDING, DocumentStatus.IN_PROGRESS, DocumentStatus.APPROVED)


def _content_dates(content: Dict[str, Any]) -> Optional[Tuple[date, date]]:
    try:
        return date.fromisoformat(content["startDate"]), date.fromisoformat(content["endDate"])
    except (KeyError, TypeError, ValueError):
        return None


def to_vacation_response(document: ApprovalDocument) -> Optional[VacationRequestResponse]:
    """Map a VACATION document to a response; None when its content is not a valid leave request"""
    content = document.content or {}
    dates = _content_dates(content)
    if dates is None or content.get("vacationType") not in VacationType.__members__:
        logger.warning(f"Skipping vacation document {document.document_no}: malformed content")
        return None
    try:
        days = float(content.get("days", 0))
    except (TypeError, ValueError):
        logger.warning(f"Skipping vacation document {document.document_no}: invalid days")
        return None
    return VacationRequestResponse(
        document_id=document.id,
        document_no=document.document_no,
        title=document.title,
        requester_id=document.requester_id,
        requester_name=document.requester.full_name if document.requester else None,
        department_id=document.requester_department_id,
        vacation_type=content.get("vacationType"),
        start_date=dates[0],
        end_date=dates[1],
        days=days,
        reason=content.get("reason"),
        status=document.current_status,
        current_level=document.current_level,
        total_level=document.total_level,
    )


class VacationService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.approval_service = ApprovalService(session)

    async def _get_vacation_form(self) -> ApprovalForm:
        form = await self.approval_service.get_form_by_code(settings.VACATION_FORM_CODE)
        if not form or not form.is_active:
            raise NotFoundError("Vacation approval form is not configured")
        return form

    async def _vacation_documents(self, *conditions) -> List[ApprovalDocument]:
        form = await self._get_vacation_form()
        result = await self.session.execute(
            select(ApprovalDocument)
            .options(selectinload(ApprovalDocument.requester))
            .where(ApprovalDocument.form_id == form.id, *conditions)
            .order_by(ApprovalDocument.id.desc())
        )
        return list(result.scalars().all())

    async def _vacation_requests(self, *conditions) -> List[VacationRequestResponse]:
        responses = (to_vacation_response(d) for d in await self._vacation_documents(*conditions))
        return [r for r in responses if r is not None]

    async def get_annual_leave_balance(self, employee_id: int, year: int) -> AnnualLeaveBalance:
        requests = await self._vacation_requests(
            ApprovalDocument.requester_id == employee_id,
            ApprovalDocument.current_status.in_(LIVE_STATUSES),
        )
        used = sum(
            r.days for r in requests
            if r.vacation_type == VacationType.ANNUAL and r.start_date.year == year
        )
        total = float(settings.ANNUAL_LEAVE_DAYS)
        return AnnualLeaveBalance(
            year=year,
            total_days=total,
            used_days=used,
            remaining_days=max(total - used, 0),
        )

    async def request_vacation(
        self,
        data: VacationRequestCreate,
        requester: Employee,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> VacationRequestResponse:
        """Validate a leave request and submit it as a VACATION approval document"""
        if data.start_date < date.today():
            raise ValidationError("Start date cannot be in the past")

        form = await self._get_vacation_form()
        requester_id = requester.id

        if data.vacation_type == VacationType.ANNUAL:
            balance = await self.get_annual_leave_balance(requester_id, data.start_date.year)
            if data.days > balance.remaining_days:
                raise ValidationError(
                    f"Insufficient annual leave. Remaining: {balance.remaining_days:g} days, "
                    f"requested: {data.days:g} days"
                )

        content = {
            "vacationType": data.vacation_type.value,
            "startDate": data.start_date.isoformat(),
            "endDate": data.end_date.isoformat(),
            "days": data.days,
            "reason": data.reason,
        }
        title = f"{data.vacation_type.value} leave ({data.start_date.isoformat()} ~ {data.end_date.isoformat()})"

        detail = await self.approval_service.create_document(
            form_id=form.id,
            title=title,
            content=content,
            requester_id=requester_id,
            ip_address=ip_address,
            user_agent=user_agent,
            allow_vacation_form=True,
        )
        logger.info(f"Vacation requested by {requester_id}: {detail.document_no} {data.days:g} days")

        document = await self.session.scalar(
            select(ApprovalDocument)
            .options(selectinload(ApprovalDocument.requester))
            .where(ApprovalDocument.id == detail.id)
        )
        return to_vacation_response(document)

    async def get_my_requests(
        self,
        requester_id: int,
        status_filter: Optional[DocumentStatus] = None,
        year: Optional[int] = None,
        page_index: int = 1,
        page_size: int = 20
    ) -> Dict[str, Any]:
        conditions = [ApprovalDocument.requester_id == requester_id]
        if status_filter is not None:
            conditions.append(ApprovalDocument.current_status == status_filter)

        requests = await self._vacation_requests(*conditions)
        if year is not None:
            requests = [r for r in requests if r.start_date.year == year]

        skip = (page_index - 1) * page_size
        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": len(requests),
            "data": requests[skip:skip + page_size]
        }

    async def get_team_status(
        self,
        actor: Employee,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        department_id: Optional[int] = None
    ) -> TeamVacationStatus:
        """Vacation requests overlapping the range; managers only see their own department"""
        checker = PermissionChecker(actor)
        checker.require_role(UserRole.ADMIN, UserRole.MANAGER)

        if checker.role == UserRole.MANAGER:
            department_id = actor.department_id

        today = date.today()
        if start_date is None:
            start_date = today.replace(day=1)
        if end_date is None:
            end_date = start_date.replace(day=calendar.monthrange(start_date.year, start_date.month)[1])
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        conditions = [ApprovalDocument.current_status.in_(LIVE_STATUSES)]
        if department_id is not None:
            conditions.append(ApprovalDocument.requester_department_id == department_id)

        requests = [
            r for r in await self._vacation_requests(*conditions)
            if r.start_date <= end_date and r.end_date >= start_date
        ]
        requests.sort(key=lambda r: (r.start_date, r.requester_id))

        return TeamVacationStatus(
            start_date=start_date,
            end_date=end_date,
            department_id=department_id,
            requests=requests,
        )
