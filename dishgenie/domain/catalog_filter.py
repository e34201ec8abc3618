import logging

from dishgenie.domain.models import CookingTime, DishRecord, MealType, UserProfile
from dishgenie.domain.time_parser import UNBOUNDED, known_minutes


logger = logging.getLogger(__name__)


MAX_MINUTES: dict[CookingTime, float] = {
    CookingTime.QUICK: 30,
    CookingTime.MODERATE: 60,
    CookingTime.ELABORATE: UNBOUNDED,
    CookingTime.ANY: UNBOUNDED,
}

# Catalog course labels are inconsistent, so each meal accepts a few aliases.
COURSE_ALIASES: dict[MealType, tuple[str, ...]] = {
    MealType.BREAKFAST: ("breakfast",),
    MealType.LUNCH: ("lunch", "main course"),
    MealType.SNACKS: ("snacks", "snack", "appetizer"),
    MealType.DINNER: ("dinner", "main course"),
}

# The catalog has no vegan tag: vegetarian without these is the closest we get.
NON_VEGAN_MARKERS = ("ghee", "yogurt")


def total_minutes(dish: DishRecord) -> int:
    return known_minutes(dish.prep_time) + known_minutes(dish.cook_time)


def meal_type_match(dish: DishRecord, meal_type: MealType) -> bool:
    course = dish.course.lower()
    return any(alias in course for alias in COURSE_ALIASES[meal_type])


def time_match(dish: DishRecord, cooking_time: CookingTime) -> bool:
    max_minutes = MAX_MINUTES[cooking_time]
    if max_minutes == UNBOUNDED:
        return True
    total = total_minutes(dish)
    return total == 0 or total <= max_minutes


def dietary_match(dish: DishRecord, restrictions: tuple[str, ...]) -> bool:
    diet = dish.diet.strip().lower()
    ingredients = dish.ingredients_text.lower()
    for restriction in restrictions:
        match restriction.strip().lower():
            case "vegan":
                if diet != "vegetarian":
                    return False
                if any(marker in ingredients for marker in NON_VEGAN_MARKERS):
                    return False
            case "vegetarian":
                if diet != "vegetarian":
                    return False
            case _:
                # Not enforced.
                pass
    return True


def parse_allergies(allergies: str) -> list[str]:
    return [a.strip().lower() for a in allergies.split(",") if a.strip()]


def allergy_match(dish: DishRecord, allergens: list[str]) -> bool:
    ingredients = dish.ingredients_text.lower()
    return not any(allergen in ingredients for allergen in allergens)


def filter_dishes(
    dishes: list[DishRecord],
    profile: UserProfile,
    meal_type: MealType,
) -> list[DishRecord]:
    allergens = parse_allergies(profile.allergies)
    filtered = [
        dish
        for dish in dishes
        if meal_type_match(dish, meal_type)
        and time_match(dish, profile.cooking_time)
        and dietary_match(dish, profile.dietary_restrictions)
        and allergy_match(dish, allergens)
    ]
    logger.info(
        "Filtered %d catalog dishes down to %d for %s",
        len(dishes),
        len(filtered),
        meal_type.value,
    )
    return filtered
