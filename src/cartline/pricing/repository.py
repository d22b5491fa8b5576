"""Resolution of the business objects cart items stand for."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pymongo import MongoClient

from ..utils.config import Config
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ModelRepository:
    """Interface cart items use to resolve their linked model.

    ``descriptor`` names a known model type; ``relations`` names related data
    to load along with the record.
    """

    def has_type(self, descriptor: str) -> bool:
        raise NotImplementedError

    def resolve(self, descriptor: str, item_id: Any, relations: Sequence[str] = ()) -> Optional[Any]:
        raise NotImplementedError


class MongoModelRepository(ModelRepository):
    """Model types backed by MongoDB collections.

    Each model type maps to a collection. A record is looked up by ``_id``;
    every relation is another registered type whose documents point back at
    the record through a ``<type>Id`` field, and they are attached to the
    record under the relation name.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        db_name: Optional[str] = None,
        collections: Optional[Dict[str, str]] = None,
        config: Optional[Config] = None,
    ) -> None:
        config = config or Config(".env")
        self._url = url or config.get("mongo_url")
        self._db = db_name or config.get("mongo_db")
        self._collections = dict(collections if collections is not None else config.get("model_collections") or {})
        if not self._url:
            raise ValueError("DB_CONNECTION_URL is required")
        self._client: Optional[MongoClient] = None

    def __enter__(self) -> "MongoModelRepository":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def connect(self) -> None:
        if self._client is None:
            self._client = MongoClient(self._url, serverSelectionTimeoutMS=5000)

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def has_type(self, descriptor: str) -> bool:
        return descriptor in self._collections

    def _collection(self, descriptor: str):
        if self._client is None:
            self.connect()
        return self._client[self._db][self._collections[descriptor]]

    def resolve(self, descriptor: str, item_id: Any, relations: Sequence[str] = ()) -> Optional[Dict[str, Any]]:
        if not self.has_type(descriptor):
            return None

        document = self._collection(descriptor).find_one({"_id": item_id})
        if not document:
            logger.debug(f"No {descriptor} document with _id {item_id!r}")
            return None

        for relation in relations:
            if not self.has_type(relation):
                logger.warning(f"Skipping unknown relation {relation!r} for {descriptor}")
                continue
            related: List[Dict[str, Any]] = list(
                self._collection(relation).find({f"{descriptor}Id": item_id})
            )
            document[relation] = related

        return document
