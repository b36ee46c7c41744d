"""
Classes Router

- GET    /classes          - List classes in the caller's school
- POST   /classes          - Create a class
- GET    /classes/{id}     - Get a class
- PATCH  /classes/{id}     - Edit provided fields
- DELETE /classes/{id}     - Deactivate a class
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user, require_roles
from app.core.database import get_db
from app.modules.classes import service
from app.modules.classes.schemas import ClassCreate, ClassListResponse, ClassResponse, ClassUpdate
from app.modules.shared import ServiceError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()

can_manage = require_roles("school_admin", "sub_admin", "teacher")


def _internal_error(e: Exception, action: str) -> HTTPException:
    logger.exception(f"Error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred."},
    )


@router.get("", response_model=ClassListResponse)
async def list_classes(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ClassListResponse:
    classes = await service.list_classes(db, user.school_id, include_inactive)
    return ClassListResponse(
        items=[ClassResponse.model_validate(c) for c in classes],
        total=len(classes),
    )


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ClassCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_manage),
) -> ClassResponse:
    try:
        return ClassResponse.model_validate(await service.create_class(db, user, data))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "creating class") from e


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> ClassResponse:
    try:
        return ClassResponse.model_validate(await service.get_class(db, user.school_id, class_id))
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.patch("/{class_id}", response_model=ClassResponse)
async def update_class(
    class_id: str,
    data: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_manage),
) -> ClassResponse:
    try:
        return ClassResponse.model_validate(await service.update_class(db, user, class_id, data))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "updating class") from e


@router.delete("/{class_id}", response_model=ClassResponse)
async def deactivate_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_manage),
) -> ClassResponse:
    try:
        return ClassResponse.model_validate(await service.deactivate_class(db, user, class_id))
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "deactivating class") from e
