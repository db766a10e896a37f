from fastapi import APIRouter, Depends, status

from core.config import settings
from models.admin import Admin
from routes.deps import admin_required, creation_token_required, get_admin_service
from routes.responses import ok
from schemas.admin import (
    LoginRequest, CreateAdminRequest, UpdateProfileRequest, ChangePasswordRequest
)
from services.admins import AdminAccountService


router = APIRouter(prefix=f"{settings.API_V1_STR}/admin", tags=["admin"])


# Admin Login via JWT
@router.post("/login")
async def login(
    data: LoginRequest,
    service: AdminAccountService = Depends(get_admin_service),
):
    result = await service.login(data.email, data.password)
    return ok(result, "Login successful")


# Initial setup; open unless ADMIN_CREATION_TOKEN is set
@router.post("/create", status_code=status.HTTP_201_CREATED, dependencies=[Depends(creation_token_required)])
async def create_admin(
    data: CreateAdminRequest,
    service: AdminAccountService = Depends(get_admin_service),
):
    admin = await service.create(data.name, data.email, data.password, data.role)
    return ok(admin, "Admin created successfully")


@router.get("/profile")
async def get_profile(admin: Admin = Depends(admin_required)):
    return ok(admin)


@router.put("/profile")
async def update_profile(
    data: UpdateProfileRequest,
    admin: Admin = Depends(admin_required),
    service: AdminAccountService = Depends(get_admin_service),
):
    updated = await service.update_profile(admin, name=data.name, email=data.email)
    return ok(updated, "Profile updated successfully")


@router.put("/password")
async def change_password(
    data: ChangePasswordRequest,
    admin: Admin = Depends(admin_required),
    service: AdminAccountService = Depends(get_admin_service),
):
    await service.change_password(admin, data.currentPassword, data.newPassword)
    return ok(message="Password changed successfully")
