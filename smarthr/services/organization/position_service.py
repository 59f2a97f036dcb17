import logging
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from smarthr.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from smarthr.models.organization.department import Department
from smarthr.models.organization.position import Position
from smarthr.models.hr.employee import Employee
from smarthr.schemas.organization.position_schema import PositionCreate, PositionUpdate, PositionResponse

logger = logging.getLogger(__name__)


class PositionService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_position(self, position_id: int) -> Position:
        result = await self.session.execute(
            select(Position).where(
                Position.id == position_id,
                Position.is_deleted == False
            )
        )
        position = result.scalar_one_or_none()
        if not position:
            raise NotFoundError("Position not found")
        return position

    async def get_position(self, position_id: int) -> PositionResponse:
        return PositionResponse.model_validate(await self._get_position(position_id))

    async def create_position(self, data: PositionCreate, created_by: Optional[int] = None) -> PositionResponse:
        try:
            department = await self.session.scalar(
                select(Department).where(
                    Department.id == data.department_id,
                    Department.is_active == True,
                    Department.is_deleted == False
                )
            )
            if not department:
                raise NotFoundError("Department not found or inactive")

            exists = await self.session.scalar(
                select(Position.id).where(
                    Position.department_id == data.department_id,
                    Position.pos_code == data.pos_code
                ).limit(1)
            )
            if exists is not None:
                raise ConflictError(f"Position code '{data.pos_code}' already exists in this department")

            position = Position(**data.model_dump(), is_active=True, created_by=created_by)
            self.session.add(position)
            await self.session.commit()
            await self.session.refresh(position)
            logger.info(f"Position created: {position.pos_code} (department {data.department_id})")
            return PositionResponse.model_validate(position)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating position: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error creating position: {e}")

    async def _ensure_no_active_dependents(self, position_id: int, action: str):
        employees = await self.session.scalar(
            select(func.count(Employee.id)).where(
                Employee.position_id == position_id,
                Employee.is_active == True
            )
        )
        if employees:
            raise InvalidStateError(f"Cannot {action} position. It has active employees")

    async def update_position(self, position_id: int, data: PositionUpdate, updated_by: Optional[int] = None) -> PositionResponse:
        try:
            position = await self._get_position(position_id)
            changes = data.model_dump(exclude_unset=True)
            if changes.get("is_active") is False and position.is_active:
                await self._ensure_no_active_dependents(position_id, "deactivate")

            for field, value in changes.items():
                setattr(position, field, value)

            position.updated_by = updated_by
            position.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            await self.session.refresh(position)
            logger.info(f"Position updated: {position.pos_code}")
            return PositionResponse.model_validate(position)

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating position {position_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error updating position: {e}")

    async def delete_position(self, position_id: int, deleted_by: Optional[int] = None) -> bool:
        try:
            position = await self._get_position(position_id)
            await self._ensure_no_active_dependents(position_id, "delete")

            position.is_active = False
            position.is_deleted = True
            position.updated_by = deleted_by
            position.updated_at = datetime.now(timezone.utc)
            await self.session.commit()
            logger.info(f"Position deleted (soft): {position.pos_code}")
            return True

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deleting position {position_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error deleting position: {e}")

    async def get_positions(
        self,
        page_index: int = 1,
        page_size: int = 100,
        department_id: Optional[int] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        query = select(Position).where(Position.is_deleted == False)
        if department_id is not None:
            query = query.where(Position.department_id == department_id)
        if is_active is not None:
            query = query.where(Position.is_active == is_active)
        if search:
            like = f"%{search}%"
            query = query.where(or_(Position.pos_code.ilike(like), Position.pos_name.ilike(like)))

        total = await self.session.scalar(select(func.count()).select_from(query.subquery()))

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            query.order_by(Position.department_id, Position.pos_grade, Position.pos_code).offset(skip).limit(page_size)
        )

        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total or 0,
            "data": [PositionResponse.model_validate(p) for p in result.scalars().all()]
        }
