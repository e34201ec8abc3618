from datetime import datetime
from enum import Enum
import re
from typing import Any, Self


type Document = dict[str, Any]


class MealType(Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    SNACKS = "Snacks"
    DINNER = "Dinner"

    @classmethod
    def for_hour(cls, hour: int) -> Self:
        if 6 <= hour < 11:
            return cls.BREAKFAST
        if 11 <= hour < 16:
            return cls.LUNCH
        if 16 <= hour < 20:
            return cls.SNACKS
        return cls.DINNER

    @classmethod
    def now(cls) -> Self:
        return cls.for_hour(datetime.now().hour)

    @classmethod
    def parse(cls, value: str) -> Self:
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unknown meal type: {value!r}")


class SpiceLevel(Enum):
    MILD = "mild"
    MEDIUM = "medium"
    HOT = "hot"
    EXTRA_HOT = "extra-hot"


class CookingTime(Enum):
    QUICK = "quick"
    MODERATE = "moderate"
    ELABORATE = "elaborate"
    ANY = "any"


def slugify(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "-", name).lower()


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _strings(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple, set, frozenset)):
        return ()
    return tuple(str(v).strip() for v in value if str(v).strip())


class UserProfile:
    """Who we are cooking for. Built once per request and never changed."""

    def __init__(
        self,
        *,
        name: str = "",
        birth_place: str = "",
        current_location: str = "",
        age: str = "",
        favorite_cuisines: tuple[str, ...] = (),
        dietary_restrictions: tuple[str, ...] = (),
        spice_level: SpiceLevel | None = None,
        cooking_time: CookingTime = CookingTime.ANY,
        family_size: str = "",
        allergies: str = "",
        additional_preferences: str = "",
    ) -> None:
        self.name = name
        self.birth_place = birth_place
        self.current_location = current_location
        self.age = age
        self.favorite_cuisines = favorite_cuisines
        self.dietary_restrictions = dietary_restrictions
        self.spice_level = spice_level
        self.cooking_time = cooking_time
        self.family_size = family_size
        self.allergies = allergies
        self.additional_preferences = additional_preferences

    def __repr__(self) -> str:
        return f"<UserProfile(name={self.name}, cooking_time={self.cooking_time.value})>"

    @classmethod
    def from_dict(cls, data: Document) -> Self:
        """Accepts the camelCase request body or a snake_case stored profile."""

        def get(camel: str, snake: str) -> Any:
            return data.get(camel, data.get(snake))

        try:
            spice_level = SpiceLevel(_text(get("spiceLevel", "spice_level")).lower())
        except ValueError:
            spice_level = None
        try:
            cooking_time = CookingTime(_text(get("cookingTime", "cooking_time")).lower())
        except ValueError:
            cooking_time = CookingTime.ANY

        return cls(
            name=_text(data.get("name")),
            birth_place=_text(get("birthPlace", "birth_place")),
            current_location=_text(get("currentLocation", "current_location")),
            age=_text(data.get("age")),
            favorite_cuisines=_strings(get("favoriteCuisines", "favorite_cuisines")),
            dietary_restrictions=_strings(
                get("dietaryRestrictions", "dietary_restrictions")
            ),
            spice_level=spice_level,
            cooking_time=cooking_time,
            family_size=_text(get("familySize", "family_size")),
            allergies=_text(data.get("allergies")),
            additional_preferences=_text(
                get("additionalPreferences", "additional_preferences")
            ),
        )

    def to_dict(self) -> Document:
        return {
            "name": self.name,
            "birthPlace": self.birth_place,
            "currentLocation": self.current_location,
            "age": self.age,
            "favoriteCuisines": list(self.favorite_cuisines),
            "dietaryRestrictions": list(self.dietary_restrictions),
            "spiceLevel": self.spice_level.value if self.spice_level else "",
            "cookingTime": self.cooking_time.value,
            "familySize": self.family_size,
            "allergies": self.allergies,
            "additionalPreferences": self.additional_preferences,
        }


DISH_RECORD_FIELDS = (
    "id",
    "name",
    "cuisine",
    "course",
    "diet",
    "prep_time",
    "cook_time",
    "ingredients",
    "instructions",
    "description",
    "image_url",
)


class DishRecord:
    """A recipe as the catalog stores it. Read only."""

    def __init__(
        self,
        *,
        id: str = "",
        name: str,
        cuisine: str = "",
        course: str = "",
        diet: str = "",
        prep_time: str = "",
        cook_time: str = "",
        ingredients: str | list[str] = "",
        instructions: str = "",
        description: str = "",
        image_url: str = "",
    ) -> None:
        self.id = id
        self.name = name
        self.cuisine = cuisine
        self.course = course
        self.diet = diet
        self.prep_time = prep_time
        self.cook_time = cook_time
        self.ingredients = ingredients
        self.instructions = instructions
        self.description = description
        self.image_url = image_url

    def __repr__(self) -> str:
        return f"<DishRecord(id={self.id}, name={self.name})>"

    @property
    def ingredients_text(self) -> str:
        if isinstance(self.ingredients, list):
            return ", ".join(str(i) for i in self.ingredients)
        return self.ingredients

    @property
    def ingredients_list(self) -> list[str]:
        if isinstance(self.ingredients, list):
            return [str(i).strip() for i in self.ingredients if str(i).strip()]
        return [i.strip() for i in self.ingredients.split(",") if i.strip()]

    @classmethod
    def from_dict(cls, data: Document) -> Self:
        ingredients = data.get("ingredients")
        if not isinstance(ingredients, list):
            ingredients = _text(ingredients)
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            cuisine=_text(data.get("cuisine")),
            course=_text(data.get("course")),
            diet=_text(data.get("diet")),
            prep_time=_text(data.get("prep_time")),
            cook_time=_text(data.get("cook_time")),
            ingredients=ingredients,
            instructions=_text(data.get("instructions")),
            description=_text(data.get("description")),
            image_url=_text(data.get("image_url")),
        )

    def to_dict(self) -> Document:
        return {field: getattr(self, field) for field in DISH_RECORD_FIELDS}


class DishRecommendation:
    """One of the three dishes handed back to the user."""

    def __init__(
        self,
        *,
        id: str,
        name: str,
        cuisine: str,
        meal_type: str,
        cooking_time: str,
        spice_level: str,
        difficulty: str,
        rating: float,
        description: str,
        ingredients: list[str],
        instructions: str,
        reason: str,
        image_url: str,
    ) -> None:
        self.id = id
        self.name = name
        self.cuisine = cuisine
        self.meal_type = meal_type
        self.cooking_time = cooking_time
        self.spice_level = spice_level
        self.difficulty = difficulty
        self.rating = rating
        self.description = description
        self.ingredients = ingredients
        self.instructions = instructions
        self.reason = reason
        self.image_url = image_url

    def __repr__(self) -> str:
        return f"<DishRecommendation(id={self.id}, name={self.name})>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DishRecommendation):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> Document:
        return {
            "id": self.id,
            "name": self.name,
            "cuisine": self.cuisine,
            "mealType": self.meal_type,
            "cookingTime": self.cooking_time,
            "spiceLevel": self.spice_level,
            "difficulty": self.difficulty,
            "rating": self.rating,
            "description": self.description,
            "ingredients": list(self.ingredients),
            "instructions": self.instructions,
            "reason": self.reason,
            "image_url": self.image_url,
        }
