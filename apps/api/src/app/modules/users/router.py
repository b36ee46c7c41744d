"""
Member Routers

CRUD endpoints for the four member lists. Each list is the same router bound
to a different MemberGroup:

- GET    /{group}            - List members (active only unless include_inactive)
- POST   /{group}            - Create a member (pending identity, welcome email follows)
- GET    /{group}/{id}       - Get one member
- PATCH  /{group}/{id}       - Edit provided fields
- DELETE /{group}/{id}       - Deactivate (soft delete)

Every endpoint is scoped to the caller's school.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, require_roles
from app.core.database import get_db
from app.modules.shared import ServiceError, to_http_exception
from app.modules.users import service
from app.modules.users.schemas import (
    MemberCreate,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
)

logger = logging.getLogger(__name__)

ADMINS = ("school_admin", "sub_admin")

# Who may read each list; writes are admin-only.
READ_ROLES: dict[str, tuple[str, ...]] = {
    "students": (*ADMINS, "teacher"),
    "teachers": ADMINS,
    "parents": (*ADMINS, "teacher"),
    "staff": ADMINS,
}


def _internal_error(e: Exception, action: str) -> HTTPException:
    logger.exception(f"Error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


def build_member_router(group_name: str) -> APIRouter:
    """Create the CRUD router for one member group."""
    group = service.get_group(group_name)
    can_read = require_roles(*READ_ROLES[group_name])
    can_write = require_roles(*ADMINS)

    router = APIRouter()

    @router.get("", response_model=MemberListResponse, summary=f"List {group_name}")
    async def list_members(
        include_inactive: bool = Query(False, description="Include deactivated members"),
        db: AsyncSession = Depends(get_db),
        user: CurrentUser = Depends(can_read),
    ) -> MemberListResponse:
        try:
            members = await service.list_members(db, user.school_id, group, include_inactive)
            return MemberListResponse(
                items=[MemberResponse.model_validate(m) for m in members],
                total=len(members),
            )
        except ServiceError as e:
            raise to_http_exception(e) from e
        except Exception as e:
            raise _internal_error(e, f"listing {group_name}") from e

    @router.post(
        "",
        response_model=MemberResponse,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create one of {group_name}",
    )
    async def create_member(
        data: MemberCreate,
        db: AsyncSession = Depends(get_db),
        user: CurrentUser = Depends(can_write),
    ) -> MemberResponse:
        try:
            member = await service.create_member(db, user, group, data)
            return MemberResponse.model_validate(member)
        except ServiceError as e:
            logger.warning(f"Create {group_name} rejected: {e.message}")
            raise to_http_exception(e) from e
        except Exception as e:
            raise _internal_error(e, f"creating {group_name}") from e

    @router.get("/{user_id}", response_model=MemberResponse)
    async def get_member(
        user_id: str,
        db: AsyncSession = Depends(get_db),
        user: CurrentUser = Depends(can_read),
    ) -> MemberResponse:
        try:
            member = await service.get_member(db, user.school_id, group, user_id)
            return MemberResponse.model_validate(member)
        except ServiceError as e:
            raise to_http_exception(e) from e

    @router.patch("/{user_id}", response_model=MemberResponse)
    async def update_member(
        user_id: str,
        data: MemberUpdate,
        db: AsyncSession = Depends(get_db),
        user: CurrentUser = Depends(can_write),
    ) -> MemberResponse:
        try:
            member = await service.update_member(db, user, group, user_id, data)
            return MemberResponse.model_validate(member)
        except ServiceError as e:
            raise to_http_exception(e) from e
        except Exception as e:
            raise _internal_error(e, f"updating {group_name}") from e

    @router.delete("/{user_id}", response_model=MemberResponse)
    async def deactivate_member(
        user_id: str,
        db: AsyncSession = Depends(get_db),
        user: CurrentUser = Depends(can_write),
    ) -> MemberResponse:
        try:
            member = await service.deactivate_member(db, user, group, user_id)
            return MemberResponse.model_validate(member)
        except ServiceError as e:
            raise to_http_exception(e) from e
        except Exception as e:
            raise _internal_error(e, f"deactivating {group_name}") from e

    return router


students_router = build_member_router("students")
teachers_router = build_member_router("teachers")
parents_router = build_member_router("parents")
staff_router = build_member_router("staff")
