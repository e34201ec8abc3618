import logging
from pathlib import Path
from typing import Any, Protocol

from databases import Database
import firebase_admin  # pyright: ignore[reportMissingTypeStubs]
from firebase_admin import credentials, firestore  # pyright: ignore[reportMissingTypeStubs]
from google.cloud.firestore import FieldFilter  # pyright: ignore[reportMissingTypeStubs]

from dishgenie.ajolt import in_thread
from dishgenie.domain.errors import CatalogError
from dishgenie.domain.models import DISH_RECORD_FIELDS, DishRecord


logger = logging.getLogger(__name__)


MAX_LIMIT = 500


class RecipeCatalog(Protocol):
    async def fetch(
        self,
        *,
        filters: dict[str, str] | None = None,
        limit: int = MAX_LIMIT,
    ) -> list[DishRecord]: ...


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS recipes (
    id VARCHAR(64) PRIMARY KEY,
    name VARCHAR(256) NOT NULL,
    cuisine VARCHAR(128),
    course VARCHAR(128),
    diet VARCHAR(64),
    prep_time VARCHAR(64),
    cook_time VARCHAR(64),
    ingredients TEXT,
    instructions TEXT,
    description TEXT,
    image_url VARCHAR(1024)
)
"""


class SqlRecipeCatalog:
    """Recipes in a SQL table, one column per `DishRecord` field."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def create_table(self) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            query=CREATE_RECIPES_TABLE
        )

    async def fetch(
        self,
        *,
        filters: dict[str, str] | None = None,
        limit: int = MAX_LIMIT,
    ) -> list[DishRecord]:
        filters = {} if filters is None else filters
        unknown = set(filters) - set(DISH_RECORD_FIELDS)
        if unknown:
            raise CatalogError(f"Cannot filter recipes on {sorted(unknown)}")

        where = " AND ".join(f"{field} = :{field}" for field in filters)
        query = "SELECT * FROM recipes"
        if where:
            query += f" WHERE {where}"
        query += " LIMIT :limit"

        try:
            rows = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
                query, values={**filters, "limit": min(limit, MAX_LIMIT)}
            )
        except Exception as e:
            raise CatalogError(f"Could not read recipes: {e!r}") from e

        return [
            DishRecord.from_dict({field: row[field] for field in DISH_RECORD_FIELDS})
            for row in rows
        ]


def init_firestore(credentials_path: Path) -> Any:
    """Firestore client, initialising the Firebase app once per process."""
    if not firebase_admin._apps:  # pyright: ignore[reportPrivateUsage]
        if not credentials_path.exists():
            raise CatalogError(
                f"Firebase credentials not found at: {credentials_path}"
            )
        firebase_admin.initialize_app(credentials.Certificate(str(credentials_path)))
    return firestore.client()


class FirestoreRecipeCatalog:
    def __init__(self, client: Any, *, collection: str = "recipes") -> None:
        self.client = client
        self.collection = collection

    def _get(self, filters: dict[str, str], limit: int) -> list[DishRecord]:
        query = self.client.collection(self.collection)
        for field, value in filters.items():
            query = query.where(filter=FieldFilter(field, "==", value))
        docs = query.limit(limit).get()

        dishes: list[DishRecord] = []
        for doc in docs:
            data = doc.to_dict() or {}
            data.setdefault("id", doc.id)
            dishes.append(DishRecord.from_dict(data))
        return dishes

    async def fetch(
        self,
        *,
        filters: dict[str, str] | None = None,
        limit: int = MAX_LIMIT,
    ) -> list[DishRecord]:
        filters = {} if filters is None else filters
        try:
            return await in_thread(self._get, filters, min(limit, MAX_LIMIT))
        except Exception as e:
            raise CatalogError(f"Could not read recipes: {e!r}") from e
