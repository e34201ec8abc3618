"""Turn whatever the model sent back into `DishRecommendation`s.

Models asked for `{"recommendations": [...]}` also answer with a bare array, or
with the array under some other key. All three are accepted. Anything else is a
`ParseError`.
"""

import json
import math
from numbers import Real
import re
from typing import Any

from dishgenie.domain.errors import ParseError
from dishgenie.domain.models import DishRecommendation, MealType, slugify
from dishgenie.domain.prompts import placeholder_image_url


DEFAULT_RATING = 4.0
MIN_RATING, MAX_RATING = 1.0, 5.0
DEFAULT_LEVEL = "medium"

_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


def strip_fences(text: str) -> str:
    text = text.strip()
    match = _FENCE.match(text)
    return match.group(1) if match else text


def locate_items(data: Any) -> list[Any]:
    match data:
        case list():
            return data
        case {"recommendations": list() as items}:
            return items
        case dict():
            for value in data.values():
                if isinstance(value, list):
                    return value
            raise ParseError("No recommendation array in the model response.")
        case _:
            raise ParseError(
                f"Expected a JSON array or object, got {type(data).__name__}."
            )


def coerce_ingredients(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str):
        return [i.strip() for i in value.split(",") if i.strip()]
    return []


def _finite(value: Any) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(float(value))
    )


def coerce_rating(value: Any) -> float:
    if _finite(value) and MIN_RATING <= float(value) <= MAX_RATING:
        return float(value)
    return DEFAULT_RATING


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def coerce_cooking_time(value: Any) -> str:
    if _finite(value):
        return f"{int(value)} mins"
    if isinstance(value, Real) and not isinstance(value, bool):
        return ""
    return _text(value)


def coerce_item(item: dict[str, Any], meal_type: MealType | None) -> DishRecommendation:
    name = _text(item.get("name")).strip()
    return DishRecommendation(
        id=_text(item.get("id")) or slugify(name),
        name=name,
        cuisine=_text(item.get("cuisine")),
        meal_type=_text(
            item.get("mealType"), meal_type.value if meal_type is not None else ""
        ),
        cooking_time=coerce_cooking_time(item.get("cookingTime")),
        spice_level=_text(item.get("spiceLevel"), DEFAULT_LEVEL),
        difficulty=_text(item.get("difficulty"), DEFAULT_LEVEL),
        rating=coerce_rating(item.get("rating")),
        description=_text(item.get("description")),
        ingredients=coerce_ingredients(item.get("ingredients")),
        instructions=_text(item.get("instructions")),
        reason=_text(item.get("reason")),
        image_url=_text(item.get("image_url")) or placeholder_image_url(name),
    )


def _reject_constant(name: str) -> Any:
    raise ParseError(f"Model response is not valid JSON: {name} is not a number.")


def normalize(
    raw_text: str,
    *,
    meal_type: MealType | None = None,
) -> list[DishRecommendation]:
    try:
        data = json.loads(strip_fences(raw_text), parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(f"Model response is not valid JSON: {e}") from e

    items = locate_items(data)
    if not items:
        raise ParseError("Model returned an empty recommendation list.")
    first = items[0]
    if not isinstance(first, dict) or not _text(first.get("name")).strip():
        raise ParseError("Model recommendations are not dish objects with a name.")

    return [
        coerce_item(item, meal_type)
        for item in items
        if isinstance(item, dict) and _text(item.get("name")).strip()
    ]
