from abc import ABC, abstractmethod
from typing import Any, Dict, List


class DocumentStore(ABC):
    @abstractmethod
    async def query(self, collection: str, field: str, value: str) -> List[Dict[str, Any]]:
        """
        Return every document in collection whose field equals value.

        Each document is a plain dict of its fields plus an "id" key holding
        the store-assigned document id.
        """
        pass

    @abstractmethod
    async def delete_by_id(self, collection: str, doc_id: str) -> None:
        """Delete one document. Raises StoreError on failure."""
        pass
