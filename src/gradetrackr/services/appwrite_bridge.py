import asyncio
from typing import Dict, Optional

from appwrite.client import Client
from appwrite.exception import AppwriteException
from appwrite.services.databases import Databases

from gradetrackr.config.settings import settings
from gradetrackr.services.bridge import BridgeError, DataBridge


class AppwriteBridgeError(BridgeError):
    pass


class AppwriteDataBridge(DataBridge):
    """Keeps the whole gradebook blob in one Appwrite document (``payload``)."""

    PAYLOAD_FIELD = "payload"

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        api_key: str,
        database_id: str,
        collection_id: str,
        document_id: str,
        db: Optional[Databases] = None,
    ) -> None:
        if not endpoint:
            raise AppwriteBridgeError("Missing APPWRITE_ENDPOINT in environment")
        if not project_id:
            raise AppwriteBridgeError("Missing APPWRITE_PROJECT_ID in environment")
        if not api_key:
            raise AppwriteBridgeError("Missing APPWRITE_API_KEY in environment")
        if not database_id:
            raise AppwriteBridgeError("Missing APPWRITE_DATABASE_ID in environment")

        self.endpoint = endpoint.rstrip("/")
        self.database_id = database_id
        self.collection_id = collection_id
        self.document_id = document_id

        if db is None:
            client = Client()
            client.set_endpoint(self.endpoint)
            client.set_project(project_id)
            client.set_key(api_key)
            db = Databases(client)
        self.db = db

    @classmethod
    def from_settings(cls) -> "AppwriteDataBridge":
        return cls(
            endpoint=settings.appwrite_endpoint,
            project_id=settings.appwrite_project_id,
            api_key=settings.appwrite_api_key,
            database_id=settings.appwrite_database_id,
            collection_id=settings.appwrite_collection_id,
            document_id=settings.appwrite_document_id,
        )

    @staticmethod
    def _is_missing(exc: AppwriteException) -> bool:
        return getattr(exc, "code", None) == 404

    def _load(self) -> str:
        try:
            doc: Dict = self.db.get_document(self.database_id, self.collection_id, self.document_id)
        except AppwriteException as exc:
            if self._is_missing(exc):
                return "{}"
            raise AppwriteBridgeError(str(exc)) from exc
        return str(doc.get(self.PAYLOAD_FIELD) or "{}")

    def _save(self, data: str) -> None:
        payload = {self.PAYLOAD_FIELD: data}
        try:
            self.db.update_document(self.database_id, self.collection_id, self.document_id, payload)
            return
        except AppwriteException as exc:
            if not self._is_missing(exc):
                raise AppwriteBridgeError(str(exc)) from exc
        try:
            self.db.create_document(self.database_id, self.collection_id, self.document_id, payload)
        except AppwriteException as exc:
            raise AppwriteBridgeError(str(exc)) from exc

    async def load_data(self) -> str:
        return await asyncio.to_thread(self._load)

    async def save_data(self, data: str) -> None:
        await asyncio.to_thread(self._save, data)

    async def get_data_location(self) -> str:
        return f"{self.endpoint} (database {self.database_id}, document {self.collection_id}/{self.document_id})"
