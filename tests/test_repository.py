from pathlib import Path
from typing import Any

from databases import Database
from google.cloud.firestore import FieldFilter  # pyright: ignore[reportMissingTypeStubs]
import pytest

from dishgenie.domain.errors import CatalogError
from dishgenie.domain.repository import FirestoreRecipeCatalog, SqlRecipeCatalog


INSERT_RECIPE = """
INSERT INTO recipes
    (id, name, cuisine, course, diet, prep_time, cook_time,
     ingredients, instructions, description, image_url)
VALUES
    (:id, :name, :cuisine, :course, :diet, :prep_time, :cook_time,
     :ingredients, :instructions, :description, :image_url)
"""


def recipe_row(id: str, name: str, diet: str) -> dict[str, str]:
    return {
        "id": id,
        "name": name,
        "cuisine": "South Indian",
        "course": "Lunch",
        "diet": diet,
        "prep_time": "10 mins",
        "cook_time": "20 mins",
        "ingredients": "rice, curd, mustard seeds",
        "instructions": "Mix and temper.",
        "description": "Cooling and simple.",
        "image_url": f"https://img.example/{id}.jpg",
    }


@pytest.mark.asyncio
async def test_sql_catalog_fetch(tmp_path: Path) -> None:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'recipes.db'}")
    await db.connect()
    try:
        catalog = SqlRecipeCatalog(db)
        await catalog.create_table()
        await db.execute_many(  # pyright: ignore[reportUnknownMemberType]
            INSERT_RECIPE,
            values=[
                recipe_row("curd-rice", "Curd Rice", "Vegetarian"),
                recipe_row("lemon-rice", "Lemon Rice", "Vegetarian"),
                recipe_row("fish-curry", "Fish Curry", "Non Vegeterian"),
            ],
        )

        everything = await catalog.fetch()
        vegetarian = await catalog.fetch(filters={"diet": "Vegetarian"})
        one = await catalog.fetch(limit=1)
    finally:
        await db.disconnect()

    assert len(everything) == 3
    assert {d.name for d in vegetarian} == {"Curd Rice", "Lemon Rice"}
    assert len(one) == 1
    curd_rice = next(d for d in vegetarian if d.id == "curd-rice")
    assert curd_rice.to_dict() == recipe_row("curd-rice", "Curd Rice", "Vegetarian")


@pytest.mark.asyncio
async def test_sql_catalog_errors(tmp_path: Path) -> None:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    await db.connect()
    try:
        catalog = SqlRecipeCatalog(db)
        with pytest.raises(CatalogError):
            await catalog.fetch()
        with pytest.raises(CatalogError):
            await catalog.fetch(filters={"diet; DROP TABLE recipes": "x"})
    finally:
        await db.disconnect()


class FakeDoc:
    def __init__(self, id: str, data: dict[str, Any]) -> None:
        self.id = id
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)


class FakeQuery:
    def __init__(self, docs: list[FakeDoc]) -> None:
        self.docs = docs
        self.filters: list[Any] = []
        self.limit_to: int | None = None

    def where(self, *, filter: Any) -> "FakeQuery":
        self.filters.append(filter)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.limit_to = count
        return self

    def get(self) -> list[FakeDoc]:
        return self.docs


class FakeFirestore:
    def __init__(self, query: FakeQuery) -> None:
        self.query = query
        self.collections: list[str] = []

    def collection(self, name: str) -> FakeQuery:
        self.collections.append(name)
        return self.query


@pytest.mark.asyncio
async def test_firestore_catalog_fetch() -> None:
    query = FakeQuery(
        [
            FakeDoc(
                "doc-1",
                {"name": "Sambar", "diet": "Vegetarian", "ingredients": ["toor dal"]},
            ),
            FakeDoc("doc-2", {"id": "rasam", "name": "Rasam", "diet": "Vegetarian"}),
        ]
    )
    client = FakeFirestore(query)
    catalog = FirestoreRecipeCatalog(client, collection="indian_recipes")

    got = await catalog.fetch(filters={"diet": "Vegetarian"}, limit=900)

    assert client.collections == ["indian_recipes"]
    assert query.limit_to == 500
    (field_filter,) = query.filters
    assert isinstance(field_filter, FieldFilter)
    assert (field_filter.field_path, field_filter.op_string, field_filter.value) == (
        "diet",
        "==",
        "Vegetarian",
    )
    assert [(d.id, d.name) for d in got] == [("doc-1", "Sambar"), ("rasam", "Rasam")]
    assert got[0].ingredients == ["toor dal"]


@pytest.mark.asyncio
async def test_firestore_catalog_wraps_errors() -> None:
    class BrokenFirestore:
        def collection(self, name: str) -> Any:
            raise RuntimeError("quota exceeded")

    with pytest.raises(CatalogError):
        await FirestoreRecipeCatalog(BrokenFirestore()).fetch()
