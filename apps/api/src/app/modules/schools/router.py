"""
Schools Router

- GET   /schools/current  - The caller's school
- PATCH /schools/current  - Update school details and feature settings (admins)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user, require_roles
from app.core.database import get_db
from app.modules.schools import service
from app.modules.schools.schemas import SchoolResponse, SchoolUpdate
from app.modules.shared import ServiceError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/current", response_model=SchoolResponse)
async def get_current_school(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> SchoolResponse:
    try:
        return SchoolResponse.model_validate(await service.get_current_school(db, user))
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.patch("/current", response_model=SchoolResponse)
async def update_current_school(
    data: SchoolUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_roles("school_admin", "sub_admin")),
) -> SchoolResponse:
    try:
        return SchoolResponse.model_validate(await service.update_current_school(db, user, data))
    except ServiceError as e:
        raise to_http_exception(e) from e
