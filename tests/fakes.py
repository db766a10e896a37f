from datetime import datetime
from typing import Optional

from bson import ObjectId

from core.security import hash_password
from models.admin import Admin, AdminCredentials
from models.registrant import Registrant, RegistrantStatus
from stores import DuplicateEmailError
from stores.registrants import RegistrantQuery, parse_id
from utils.dates import utcnow
from utils.email import NotificationError


class FakeRegistrantStore:
    """In-memory stand-in for RegistrantStore with the same interface."""

    def __init__(self):
        self.docs = {}

    async def ensure_indexes(self):
        pass

    def add(self, name, email, registered_at: datetime = None, status="registered", **extra) -> Registrant:
        stamp = registered_at or utcnow()
        registrant = Registrant(
            id=str(ObjectId()),
            name=name,
            email=email,
            registrationDate=stamp,
            status=status,
            createdAt=stamp,
            updatedAt=stamp,
            **extra,
        )
        self.docs[registrant.id] = registrant
        return registrant

    def _lookup(self, registrant_id) -> Optional[Registrant]:
        if parse_id(registrant_id) is None:
            return None
        return self.docs.get(registrant_id)

    async def find_by_email(self, email):
        return next((r for r in self.docs.values() if r.email == email), None)

    async def get(self, registrant_id):
        return self._lookup(registrant_id)

    async def insert(self, name, email, now):
        # unique index semantics, independent of find_by_email
        if any(r.email == email for r in self.docs.values()):
            raise DuplicateEmailError(email)
        return self.add(name, email, now)

    async def search(self, query: RegistrantQuery):
        matches = list(self.docs.values())
        if query.status:
            matches = [r for r in matches if r.status.value == query.status]
        if query.search:
            term = query.search.lower()
            matches = [r for r in matches if term in r.name.lower() or term in r.email.lower()]
        reverse = query.sort_order == "desc"
        matches.sort(key=lambda r: (getattr(r, query.sort_by), r.id), reverse=reverse)
        return matches[query.skip:query.skip + query.limit], len(matches)

    async def update_fields(self, registrant_id, fields, now):
        registrant = self._lookup(registrant_id)
        if registrant is None:
            return None
        updated = registrant.model_copy(update=dict(fields, updatedAt=now))
        self.docs[registrant_id] = updated
        return updated

    async def update_status(self, registrant_id, status, now):
        return await self.update_fields(registrant_id, {"status": RegistrantStatus(status)}, now)

    async def mark_email_sent(self, registrant_id, now):
        return await self.update_fields(registrant_id, {"emailSent": True, "emailSentAt": now}, now)

    async def mark_reminder_sent(self, registrant_id, now):
        return await self.update_fields(registrant_id, {"reminderSent": True, "reminderSentAt": now}, now)

    async def delete(self, registrant_id):
        if self._lookup(registrant_id) is None:
            return None
        return self.docs.pop(registrant_id)

    async def delete_many(self, registrant_ids):
        deleted = 0
        for registrant_id in set(registrant_ids):
            if await self.delete(registrant_id):
                deleted += 1
        return deleted

    async def count(self, since=None, until=None, **equals):
        total = 0
        for r in self.docs.values():
            if since is not None and r.registrationDate < since:
                continue
            if until is not None and r.registrationDate >= until:
                continue
            values = {k: getattr(r, k) for k in equals}
            if "status" in values:
                values["status"] = values["status"].value
            if values != equals:
                continue
            total += 1
        return total

    async def count_by_status(self):
        counts = {}
        for r in self.docs.values():
            counts[r.status.value] = counts.get(r.status.value, 0) + 1
        return counts

    async def registration_dates(self, since, until):
        return [
            r.registrationDate for r in self.docs.values()
            if since <= r.registrationDate < until
        ]

    async def recent(self, limit=10):
        ordered = sorted(self.docs.values(), key=lambda r: r.registrationDate, reverse=True)
        return ordered[:limit]

    async def pending_reminders(self):
        return [
            r for r in self.docs.values()
            if r.status in (RegistrantStatus.REGISTERED, RegistrantStatus.CONFIRMED) and not r.reminderSent
        ]


class FakeAdminStore:

    def __init__(self):
        self.docs = {}
        self.hashes = {}

    async def ensure_indexes(self):
        pass

    def add(self, name, email, password, role="admin") -> Admin:
        admin = Admin(id=str(ObjectId()), name=name, email=email, role=role, createdAt=utcnow(), updatedAt=utcnow())
        self.docs[admin.id] = admin
        self.hashes[admin.id] = hash_password(password)
        return admin

    async def get(self, admin_id):
        if parse_id(admin_id) is None:
            return None
        return self.docs.get(admin_id)

    async def find_by_email(self, email):
        return next((a for a in self.docs.values() if a.email == email), None)

    async def get_credentials(self, email=None, admin_id=None):
        admin = await self.get(admin_id) if admin_id is not None else await self.find_by_email(email)
        if admin is None:
            return None
        return AdminCredentials(admin=admin, password_hash=self.hashes[admin.id])

    async def insert(self, name, email, password_hash, role, now):
        if await self.find_by_email(email):
            raise DuplicateEmailError(email)
        admin = Admin(id=str(ObjectId()), name=name, email=email, role=role, createdAt=now, updatedAt=now)
        self.docs[admin.id] = admin
        self.hashes[admin.id] = password_hash
        return admin

    async def update(self, admin_id, fields, now):
        admin = await self.get(admin_id)
        if admin is None:
            return None
        updated = admin.model_copy(update=dict(fields, updatedAt=now))
        self.docs[admin_id] = updated
        return updated

    async def set_password(self, admin_id, password_hash, now):
        if admin_id not in self.docs:
            return False
        self.hashes[admin_id] = password_hash
        return True


class FakeMailer:
    """Records messages instead of calling the provider. Emails in `failing` raise."""

    def __init__(self):
        self.confirmations = []
        self.reminders = []
        self.failing = set()
        self.fail_all = False

    def _check(self, email):
        if self.fail_all or email in self.failing:
            raise NotificationError(f"provider rejected {email}")

    def send_confirmation(self, name, email):
        self._check(email)
        self.confirmations.append((name, email))

    def send_reminder(self, name, email):
        self._check(email)
        self.reminders.append((name, email))
