"""
User Management API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import List

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import UserCreate, UserUpdate, UserResponse
from tourdesk.services.user_service import UserService
from tourdesk.services.permission_service import PermissionService
from tourdesk.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse], dependencies=[Depends(PermissionChecker(["users:view"]))])
async def list_users(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List all users"""
    return UserService(db).get_all()


@router.get("/permissions/by-category", dependencies=[Depends(PermissionChecker(["users:view"]))])
async def list_permissions_by_category(
    current_user = Depends(get_current_active_user)
):
    """Permissions grouped by area, for the role editor"""
    return PermissionService.get_permissions_by_category()


@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(PermissionChecker(["users:view"]))])
async def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Get user by ID"""
    user = UserService(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("", response_model=UserResponse, dependencies=[Depends(PermissionChecker(["users:create"]))])
async def create_user(
    user_data: UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Create a new user"""
    try:
        user = UserService(db).create(user_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    AuditService(db).log_request(
        request, current_user, AuditAction.USER_CREATED, "User", user.id,
        f"User '{user.username}' created with role '{user.role}'",
        new_values={"username": user.username, "email": user.email, "role": user.role}
    )
    db.commit()
    db.refresh(user)
    return user


@router.patch("/{user_id}", response_model=UserResponse, dependencies=[Depends(PermissionChecker(["users:edit"]))])
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Update a user's profile, role or active flag"""
    user_service = UserService(db)
    existing = user_service.get_by_id(user_id)
    if not existing:
        raise HTTPException(status_code=404, detail="User not found")
    old_values = {"email": existing.email, "role": existing.role, "is_active": existing.is_active}

    if user_id == current_user.id and user_data.is_active is False:
        raise HTTPException(status_code=400, detail="You cannot disable your own account")

    try:
        user = user_service.update(user_id, user_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    AuditService(db).log_request(
        request, current_user, AuditAction.USER_UPDATED, "User", user.id,
        f"User '{user.username}' updated",
        old_values=old_values,
        new_values={"email": user.email, "role": user.role, "is_active": user.is_active}
    )
    db.commit()
    db.refresh(user)
    return user
