"""
Announcements Router

- GET    /announcements        - List (newest first, with author)
- POST   /announcements        - Publish (emails the audience in the background)
- GET    /announcements/{id}   - Get one
- PATCH  /announcements/{id}   - Edit provided fields
- DELETE /announcements/{id}   - Delete
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUser, get_current_user, require_roles
from app.core.database import get_db
from app.modules.announcements import service
from app.modules.announcements.schemas import (
    AnnouncementCreate,
    AnnouncementListResponse,
    AnnouncementResponse,
    AnnouncementUpdate,
    AuthorInfo,
)
from app.modules.shared import ServiceError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()

can_author = require_roles("school_admin", "sub_admin", "teacher")


def _to_response(view: service.AnnouncementView) -> AnnouncementResponse:
    response = AnnouncementResponse.model_validate(view.announcement)
    if view.author is not None:
        response.author = AuthorInfo(
            id=view.author.id,
            name=view.author.full_name or view.announcement.author_name,
            role=view.author.role.value,
            avatar=(view.author.profile or {}).get("avatar"),
        )
    return response


def _internal_error(e: Exception, action: str) -> HTTPException:
    logger.exception(f"Error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred."},
    )


@router.get("", response_model=AnnouncementListResponse)
async def list_announcements(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> AnnouncementListResponse:
    views = await service.list_announcements(db, user)
    return AnnouncementListResponse(items=[_to_response(v) for v in views], total=len(views))


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_author),
) -> AnnouncementResponse:
    try:
        announcement = await service.create_announcement(db, user, data)
        return AnnouncementResponse.model_validate(announcement)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "creating announcement") from e


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    announcement_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
) -> AnnouncementResponse:
    try:
        return _to_response(await service.get_announcement(db, user, announcement_id))
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.patch("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: str,
    data: AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_author),
) -> AnnouncementResponse:
    try:
        announcement = await service.update_announcement(db, user, announcement_id, data)
        return AnnouncementResponse.model_validate(announcement)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "updating announcement") from e


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(can_author),
) -> Response:
    try:
        await service.delete_announcement(db, user, announcement_id)
    except ServiceError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        raise _internal_error(e, "deleting announcement") from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
