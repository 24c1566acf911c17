import logging
import httpx
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from .client import DocumentStore
from ..domain.errors import StoreError

logger = logging.getLogger(__name__)

FIRESTORE_URL = "https://firestore.googleapis.com/v1"


class FirestoreStore(DocumentStore):
    """Firestore document store over the REST API."""

    def __init__(
        self,
        project_id: str,
        database: str = "(default)",
        id_token: Optional[str] = None,
        timeout: float = 10.0,
        base_url: str = FIRESTORE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.project_id = project_id
        self.database = database
        self.documents_path = f"projects/{project_id}/databases/{database}/documents"
        self.base_url = base_url.rstrip("/")

        headers = {}
        if id_token:
            headers["Authorization"] = f"Bearer {id_token}"
        self.client = client or httpx.AsyncClient(headers=headers, timeout=timeout)

    async def query(self, collection: str, field: str, value: str) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{self.documents_path}:runQuery"
        body = {
            "structuredQuery": {
                "from": [{"collectionId": collection}],
                "where": {
                    "fieldFilter": {
                        "field": {"fieldPath": field},
                        "op": "EQUAL",
                        "value": {"stringValue": value},
                    }
                },
            }
        }

        rows = await self._request("POST", url, json=body)
        if not isinstance(rows, list):
            raise StoreError(f"unexpected runQuery response for '{collection}'")

        documents = []
        # rows without a "document" only carry readTime (empty result / progress)
        for row in rows:
            document = row.get("document")
            if not document:
                continue
            documents.append(decode_document(document))

        logger.debug(f"query {collection}.{field} matched {len(documents)} document(s)")
        return documents

    async def delete_by_id(self, collection: str, doc_id: str) -> None:
        # ids are opaque and may contain '#', '?', '%' or '/'
        url = f"{self.base_url}/{self.documents_path}/{quote(collection, safe='')}/{quote(doc_id, safe='')}"
        await self._request("DELETE", url)
        logger.debug(f"deleted {collection}/{doc_id}")

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {url} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {url} failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"invalid JSON from {url}") from e

    async def aclose(self) -> None:
        await self.client.aclose()


def decode_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """flatten a Firestore REST document into {"id": ..., <field>: <value>}."""
    # name looks like projects/p/databases/d/documents/profiles/<id>
    name = document.get("name", "")
    data = {key: decode_value(value) for key, value in document.get("fields", {}).items()}
    data["id"] = name.rsplit("/", 1)[-1]
    return data


def decode_value(value: Dict[str, Any]) -> Any:
    """convert one typed Firestore value into a plain Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        # int64 values are sent as strings
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "timestampValue" in value:
        return value["timestampValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "bytesValue" in value:
        # base64 text as sent on the wire
        return value["bytesValue"]
    if "geoPointValue" in value:
        point = value["geoPointValue"]
        return {"latitude": point.get("latitude", 0.0), "longitude": point.get("longitude", 0.0)}
    if "mapValue" in value:
        fields = value["mapValue"].get("fields", {})
        return {k: decode_value(v) for k, v in fields.items()}
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    # one odd field must not fail a whole query, hand it back undecoded
    logger.debug(f"passing through unknown Firestore value: {sorted(value)}")
    return value
