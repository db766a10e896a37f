from datetime import datetime
from typing import Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from models.admin import Admin, AdminCredentials
from stores import DuplicateEmailError
from stores.registrants import parse_id
from utils.dates import to_storage

# the hash stays inside this module unless credentials are asked for explicitly
WITHOUT_PASSWORD = {"password": 0}


class AdminStore:

    def __init__(self, collection):
        self.collection = collection

    async def ensure_indexes(self):
        await self.collection.create_index("email", unique=True)

    async def get(self, admin_id: str) -> Optional[Admin]:
        oid = parse_id(admin_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid}, WITHOUT_PASSWORD)
        return Admin.from_document(doc) if doc else None

    async def find_by_email(self, email: str) -> Optional[Admin]:
        doc = await self.collection.find_one({"email": email}, WITHOUT_PASSWORD)
        return Admin.from_document(doc) if doc else None

    async def get_credentials(self, email: str = None, admin_id: str = None) -> Optional[AdminCredentials]:
        if admin_id is not None:
            oid = parse_id(admin_id)
            if oid is None:
                return None
            doc = await self.collection.find_one({"_id": oid})
        else:
            doc = await self.collection.find_one({"email": email})
        if not doc:
            return None
        return AdminCredentials(admin=Admin.from_document(doc), password_hash=doc.get("password", ""))

    async def insert(self, name: str, email: str, password_hash: str, role: str, now: datetime) -> Admin:
        stamp = to_storage(now)
        doc = {
            "name": name,
            "email": email,
            "password": password_hash,
            "role": role,
            "createdAt": stamp,
            "updatedAt": stamp,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateEmailError(email)
        doc["_id"] = result.inserted_id
        return Admin.from_document(doc)

    async def update(self, admin_id: str, fields: dict, now: datetime) -> Optional[Admin]:
        oid = parse_id(admin_id)
        if oid is None:
            return None
        update = dict(fields)
        update["updatedAt"] = to_storage(now)
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": update},
                projection=WITHOUT_PASSWORD,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise DuplicateEmailError(fields.get("email"))
        return Admin.from_document(doc) if doc else None

    async def set_password(self, admin_id: str, password_hash: str, now: datetime) -> bool:
        oid = parse_id(admin_id)
        if oid is None:
            return False
        result = await self.collection.update_one(
            {"_id": oid},
            {"$set": {"password": password_hash, "updatedAt": to_storage(now)}},
        )
        return result.matched_count > 0
