from fastapi import APIRouter, Depends, Query, Path, Body, status
from typing import Optional

from core.config import settings
from models.admin import Admin
from routes.deps import (
    admin_required,
    get_query_service,
    get_registration_service,
    get_statistics_service,
)
from routes.responses import ok
from schemas.registrant import RegisterRequest, StatusUpdateRequest, BulkDeleteRequest
from services.query import AdminQueryService
from services.registration import RegistrationService
from services.statistics import StatisticsService


router = APIRouter(prefix=f"{settings.API_V1_STR}/users", tags=["users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
):
    registrant = await service.register(data.name, data.email)
    return ok(registrant, "Successfully registered for webinar")


@router.get("/public-stats")
async def public_stats(service: StatisticsService = Depends(get_statistics_service)):
    return ok(await service.public_stats())


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sortBy: str = Query("registrationDate"),
    sortOrder: str = Query("desc"),
    admin: Admin = Depends(admin_required),
    service: AdminQueryService = Depends(get_query_service),
):
    result = await service.list(
        page=page,
        limit=limit,
        status=status,
        search=search,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
    return ok(result)


@router.get("/stats")
async def get_stats(
    admin: Admin = Depends(admin_required),
    service: StatisticsService = Depends(get_statistics_service),
):
    return ok(await service.compute())


@router.post("/reminders")
async def send_reminders(
    admin: Admin = Depends(admin_required),
    service: RegistrationService = Depends(get_registration_service),
):
    result = await service.send_reminders()
    if result.sentCount == 0 and result.failedCount == 0:
        return ok(result, "No users found to send reminders to")
    return ok(result, f"Reminder emails sent. Success: {result.sentCount}, Failed: {result.failedCount}")


@router.get("/{user_id}")
async def get_user(
    user_id: str = Path(...),
    admin: Admin = Depends(admin_required),
    service: AdminQueryService = Depends(get_query_service),
):
    return ok(await service.get(user_id))


@router.put("/{user_id}/status")
async def update_user_status(
    data: Optional[StatusUpdateRequest] = Body(None),
    user_id: str = Path(...),
    admin: Admin = Depends(admin_required),
    service: AdminQueryService = Depends(get_query_service),
):
    registrant = await service.update_status(user_id, data.status if data else None)
    return ok(registrant, "User status updated successfully")


@router.post("/{user_id}/resend-confirmation")
async def resend_confirmation(
    user_id: str = Path(...),
    admin: Admin = Depends(admin_required),
    service: RegistrationService = Depends(get_registration_service),
):
    result = await service.resend_confirmation(user_id)
    return ok(result, "Confirmation email resent successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str = Path(...),
    admin: Admin = Depends(admin_required),
    service: AdminQueryService = Depends(get_query_service),
):
    result = await service.delete(user_id)
    return ok(result, "User deleted successfully")


@router.delete("")
async def delete_users(
    data: Optional[BulkDeleteRequest] = Body(None),
    admin: Admin = Depends(admin_required),
    service: AdminQueryService = Depends(get_query_service),
):
    result = await service.delete_many(data.userIds if data else None)
    return ok(result, f"{result.deletedCount} users deleted successfully")
