import logging
from typing import Any

from google.api_core.exceptions import GoogleAPICallError, NotFound as DocumentNotFound
from google.cloud.firestore_v1 import AsyncClient
from google.cloud.firestore_v1.base_query import FieldFilter

from sinapse_regulation.config import Settings
from sinapse_regulation.errors import NotFound, StoreError

logger = logging.getLogger(__name__)


class RegulationFirestore:
    """Row store for ``RegulationRequest`` documents.

    Every call is a single awaited request. Google API failures are surfaced
    as ``StoreError`` so callers can show a transient notification and leave
    their view untouched.
    """

    def __init__(self, settings: Settings) -> None:
        self._client = AsyncClient(project=settings.gcp_project_id)
        self._collection = settings.firestore_collection

    async def insert_request(self, data: dict[str, Any]) -> str:
        doc_ref = self._client.collection(self._collection).document()
        try:
            await doc_ref.set(data)
        except GoogleAPICallError as exc:
            logger.warning("Firestore insert failed: %s", exc)
            raise StoreError("Could not save regulation request") from exc
        return doc_ref.id

    async def get_request(self, regulation_id: str) -> dict[str, Any] | None:
        doc_ref = self._client.collection(self._collection).document(regulation_id)
        try:
            doc = await doc_ref.get()
        except GoogleAPICallError as exc:
            logger.warning("Firestore read failed for %s: %s", regulation_id, exc)
            raise StoreError("Could not load regulation request") from exc
        if not doc.exists:
            return None
        return {**doc.to_dict(), "id": doc.id}

    async def update_request(self, regulation_id: str, fields: dict[str, Any]) -> None:
        """Field-level update of one document; fields not named are left as stored."""
        doc_ref = self._client.collection(self._collection).document(regulation_id)
        try:
            await doc_ref.update(fields)
        except DocumentNotFound as exc:
            raise NotFound(f"Regulation {regulation_id} not found") from exc
        except GoogleAPICallError as exc:
            logger.warning("Firestore update failed for %s: %s", regulation_id, exc)
            raise StoreError("Could not update regulation request") from exc

    async def list_requests(
        self,
        patient_id: str | None = None,
        statuses: list[str] | None = None,
        active_only: bool = True,
    ) -> list[dict[str, Any]]:
        query = self._client.collection(self._collection)
        if patient_id is not None:
            query = query.where(filter=FieldFilter("patient_id", "==", patient_id))
        if statuses:
            query = query.where(filter=FieldFilter("status", "in", statuses))
        if active_only:
            query = query.where(filter=FieldFilter("is_active", "==", True))

        results: list[dict[str, Any]] = []
        try:
            async for doc in query.stream():
                results.append({**doc.to_dict(), "id": doc.id})
        except GoogleAPICallError as exc:
            logger.warning("Firestore query failed: %s", exc)
            raise StoreError("Could not list regulation requests") from exc
        results.sort(key=lambda row: row.get("requested_at", ""))
        return results

    async def health_check(self) -> bool:
        """Verify Firestore connectivity with a lightweight read."""
        try:
            query = self._client.collection(self._collection).limit(1)
            async for _ in query.stream():
                pass
            return True
        except Exception:
            return False

    async def close(self) -> None:
        self._client.close()
