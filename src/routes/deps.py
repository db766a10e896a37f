import jwt
import structlog

from fastapi import Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.config import settings
from core.errors import UnauthorizedError, ForbiddenError
from core.security import decode_access_token
from models.admin import Admin
from services.admins import AdminAccountService
from services.query import AdminQueryService
from services.registration import RegistrationService
from services.statistics import StatisticsService


log = structlog.get_logger()
bearer = HTTPBearer(auto_error=False)


def get_registration_service(request: Request) -> RegistrationService:
    state = request.app.state
    return RegistrationService(state.registrants, state.mailer)


def get_query_service(request: Request) -> AdminQueryService:
    return AdminQueryService(request.app.state.registrants, max_page_size=settings.MAX_PAGE_SIZE)


def get_statistics_service(request: Request) -> StatisticsService:
    return StatisticsService(request.app.state.registrants)


def get_admin_service(request: Request) -> AdminAccountService:
    return AdminAccountService(request.app.state.admins)


# Admin auth
async def admin_required(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(bearer),
) -> Admin:
    if not credentials or not credentials.credentials:
        raise UnauthorizedError("Access token required")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid or expired token")

    admin = await request.app.state.admins.get(str(payload["sub"]))
    if not admin:
        raise UnauthorizedError("Invalid token - admin not found")

    structlog.contextvars.bind_contextvars(admin_id=admin.id)
    return admin


async def creation_token_required(
    credentials: HTTPAuthorizationCredentials = Security(bearer),
):
    """Only enforced when ADMIN_CREATION_TOKEN is configured."""
    if not settings.ADMIN_CREATION_TOKEN:
        return
    if not credentials or credentials.credentials != settings.ADMIN_CREATION_TOKEN:
        log.warning("admin.create_forbidden")
        raise ForbiddenError("Invalid creation token")
