"""
Dashboard Router

- GET /dashboard/navigation - Sidebar items visible to the caller's role
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.core.auth import CurrentUser, get_current_user
from app.modules.dashboard.navigation import navigation_for

router = APIRouter()


class NavItemResponse(BaseModel):
    href: str
    icon: str
    label: str


class NavigationResponse(BaseModel):
    role: str
    items: list[NavItemResponse]


@router.get("/navigation", response_model=NavigationResponse)
async def get_navigation(user: CurrentUser = Depends(get_current_user)) -> NavigationResponse:
    items = [
        NavItemResponse(href=item.href, icon=item.icon, label=item.label)
        for item in navigation_for(user.role)
    ]
    return NavigationResponse(role=user.role, items=items)
