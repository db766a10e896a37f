import structlog

from typing import Optional

from core.errors import ConflictError, UnauthorizedError, BadRequestError
from core.security import hash_password, verify_password, create_access_token
from models.admin import Admin
from schemas.admin import AdminSummary, LoginResponse
from stores import DuplicateEmailError
from stores.admins import AdminStore
from utils.dates import utcnow


log = structlog.get_logger()


class AdminAccountService:

    def __init__(self, admins: AdminStore, clock=utcnow):
        self.admins = admins
        self.clock = clock

    async def login(self, email: str, password: str) -> LoginResponse:
        credentials = await self.admins.get_credentials(email=email)
        if not credentials or not verify_password(password, credentials.password_hash):
            log.info("auth.login_failed", email=email)
            raise UnauthorizedError("Invalid credentials")

        admin = credentials.admin
        token = create_access_token(admin.id, admin.role)
        log.info("auth.login", admin_id=admin.id)
        return LoginResponse(admin=AdminSummary.from_admin(admin), token=token)

    async def create(self, name: str, email: str, password: str, role: Optional[str] = None) -> AdminSummary:
        if await self.admins.find_by_email(email):
            raise ConflictError("Admin with this email already exists")
        try:
            admin = await self.admins.insert(name, email, hash_password(password), role or "admin", self.clock())
        except DuplicateEmailError:
            raise ConflictError("Admin with this email already exists")
        log.info("admin.created", admin_id=admin.id, role=admin.role)
        return AdminSummary.from_admin(admin)

    async def update_profile(self, admin: Admin, name: Optional[str] = None, email: Optional[str] = None) -> Admin:
        if email:
            holder = await self.admins.find_by_email(email)
            if holder and holder.id != admin.id:
                raise ConflictError("Email already in use by another admin")

        fields = {}
        if name:
            fields["name"] = name
        if email:
            fields["email"] = email
        if not fields:
            return admin

        try:
            updated = await self.admins.update(admin.id, fields, self.clock())
        except DuplicateEmailError:
            raise ConflictError("Email already in use by another admin")
        if not updated:
            raise UnauthorizedError("Invalid token - admin not found")
        log.info("admin.profile_updated", admin_id=admin.id, fields=list(fields))
        return updated

    async def change_password(self, admin: Admin, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise BadRequestError("Current password and new password are required")
        credentials = await self.admins.get_credentials(admin_id=admin.id)
        if not credentials or not verify_password(current_password, credentials.password_hash):
            log.info("auth.password_change_rejected", admin_id=admin.id)
            raise UnauthorizedError("Current password is incorrect")

        await self.admins.set_password(admin.id, hash_password(new_password), self.clock())
        log.info("auth.password_changed", admin_id=admin.id)
