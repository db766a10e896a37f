from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .config import settings


def create_client(uri: str = None) -> AsyncIOMotorClient:
    # motor connects lazily, so building the client never blocks
    return AsyncIOMotorClient(uri or settings.MONGODB_URI)


def get_database(client: AsyncIOMotorClient, name: str = None) -> AsyncIOMotorDatabase:
    return client[name or settings.MONGODB_DB]
