"""
Authentication API Routes
"""
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from sqlalchemy.orm import Session
from datetime import timedelta

from tourdesk.core.database import get_db
from tourdesk.core.security import create_access_token, get_current_user
from tourdesk.core.config import settings
from tourdesk.schemas import LoginRequest, Token, UserResponse, MessageResponse, ChangePasswordRequest
from tourdesk.services.user_service import UserService
from tourdesk.services.permission_service import PermissionService
from tourdesk.services.audit_service import AuditService, AuditAction

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _refuse_login(db: Session, request: Request, username: str, user, code: int, detail: str):
    """Audit the failed attempt, commit it and raise"""
    AuditService(db).log_request(
        request, user, AuditAction.LOGIN_FAILED, "User", user.id if user else None,
        f"Failed login for '{username}'", username=username,
        status="failure", error_message=detail
    )
    db.commit()
    raise HTTPException(status_code=code, detail=detail)


@router.post("/login", response_model=Token)
async def login(
    login_data: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """Exchange username and password for a bearer token (also set as a cookie)"""
    user_service = UserService(db)
    user = user_service.authenticate(login_data.username, login_data.password)
    if not user:
        _refuse_login(db, request, login_data.username, None,
                      status.HTTP_401_UNAUTHORIZED, "Invalid username or password")
    if not user.is_active:
        _refuse_login(db, request, user.username, user, status.HTTP_403_FORBIDDEN, "Account is disabled")

    lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token({"sub": user.username, "role": user.role}, lifetime)

    user_service.record_login(user)
    AuditService(db).log_request(
        request, user, AuditAction.LOGIN, "User", user.id, f"User '{user.username}' logged in"
    )
    db.commit()

    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        max_age=int(lifetime.total_seconds()),
        samesite="lax",
        secure=settings.is_production
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Audit the logout and drop the token cookie"""
    AuditService(db).log_request(
        request, current_user, AuditAction.LOGOUT, "User", current_user.id,
        f"User '{current_user.username}' logged out"
    )
    db.commit()

    response.delete_cookie(key="access_token")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user = Depends(get_current_user)
):
    return current_user


@router.get("/permissions")
async def get_user_permissions(
    current_user = Depends(get_current_user)
):
    """Role and effective permission list of the caller"""
    return {
        "user_id": current_user.id,
        "role": current_user.role,
        "is_admin": current_user.is_admin,
        "permissions": sorted(PermissionService.get_user_permissions(current_user))
    }


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    password_data: ChangePasswordRequest,
    request: Request,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change the current user's password"""
    if password_data.new_password != password_data.confirm_password:
        raise HTTPException(status_code=400, detail="New passwords do not match")

    try:
        UserService(db).change_password(current_user, password_data.current_password, password_data.new_password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    AuditService(db).log_request(
        request, current_user, AuditAction.PASSWORD_CHANGE, "User", current_user.id,
        f"User '{current_user.username}' changed password"
    )
    db.commit()
    return {"message": "Password changed successfully"}
