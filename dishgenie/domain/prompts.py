import json
from urllib.parse import quote_plus

from dishgenie.domain.models import DishRecord, MealType, UserProfile


PLACEHOLDER_IMAGE_BASE = "https://placehold.co/600x400?text="

RECOMMENDATION_KEYS = (
    "id",
    "name",
    "cuisine",
    "mealType",
    "cookingTime",
    "spiceLevel",
    "difficulty",
    "rating",
    "description",
    "ingredients",
    "instructions",
    "reason",
    "image_url",
)


def placeholder_image_url(name: str) -> str:
    return f"{PLACEHOLDER_IMAGE_BASE}{quote_plus(name.strip() or 'Dish')}"


PERSONA = """
You are MyDishGenie, an expert Indian cuisine recommendation AI.
You know regional Indian cooking in depth and you care about what this particular
person will enjoy cooking and eating today.""".strip()


USER_PROFILE = """
USER PROFILE:
- Name: {name}
- Age: {age}
- Birth Place: {birth_place}
- Current Location: {current_location}
- Favorite Cuisines: {favorite_cuisines}
- Dietary Restrictions: {dietary_restrictions}
- Spice Level: {spice_level}
- Cooking Time Available: {cooking_time}
- Cooking For: {family_size}
- Allergies: {allergies}
- Additional Preferences: {additional_preferences}
- Meal Type: {meal_type}""".strip()


OUTPUT_CONTRACT = """
Respond with a single valid JSON object and nothing else, in exactly this shape:

{{"recommendations": [<dish>, <dish>, <dish>]}}

Each <dish> must be an object with exactly these keys:
{keys}

- "mealType" is "{meal_type}".
- "ingredients" is an array of strings.
- "rating" is a number from 1 to 5.
- "spiceLevel" and "difficulty" are one of "mild"/"medium"/"hot" and "easy"/"medium"/"hard".
- "reason" is one or two sentences telling the user, by name, why this dish suits them.
  Refer to their profile: where they grew up, where they live now, their favourite
  cuisines, spice tolerance, time available and who they are cooking for.""".strip()


CATALOG_TASK = """
Recommend exactly 3 dishes for {meal_type}, chosen ONLY from the list of dishes
below. Every dish in the list already fits the user's meal type, time budget,
diet and allergies. Copy "id", "name", "cuisine", "description", "ingredients",
"instructions" and "image_url" from the chosen dishes; do not invent dishes that
are not in the list.

AVAILABLE DISHES:
{dishes}""".strip()


KNOWLEDGE_TASK = """
Our recipe catalog is unavailable right now. Recommend exactly 3 real dishes for
{meal_type} from your own knowledge. Respect the user's dietary restrictions and
never use an ingredient they are allergic to. Keep the total cooking time within
what they have available. Use a short lowercase slug of the dish name as "id",
give full "instructions", and set "image_url" to
"{placeholder}<Dish+Name>" with the dish name URL-encoded.""".strip()


def _join(values: tuple[str, ...]) -> str:
    return ", ".join(values) if values else "None"


def render_profile(profile: UserProfile, meal_type: MealType) -> str:
    return USER_PROFILE.format(
        name=profile.name or "Guest",
        age=profile.age or "Not given",
        birth_place=profile.birth_place or "Not given",
        current_location=profile.current_location or "Not given",
        favorite_cuisines=_join(profile.favorite_cuisines),
        dietary_restrictions=_join(profile.dietary_restrictions),
        spice_level=profile.spice_level.value if profile.spice_level else "Not given",
        cooking_time=profile.cooking_time.value,
        family_size=profile.family_size or "Not given",
        allergies=profile.allergies or "None",
        additional_preferences=profile.additional_preferences or "None",
        meal_type=meal_type.value,
    )


def render_contract(meal_type: MealType) -> str:
    keys = ", ".join(f'"{k}"' for k in RECOMMENDATION_KEYS)
    return OUTPUT_CONTRACT.format(keys=keys, meal_type=meal_type.value)


class CatalogPrompt:
    """Pick 3 of the supplied catalog dishes."""

    def __init__(
        self,
        profile: UserProfile,
        meal_type: MealType,
        dishes: list[DishRecord],
        *,
        limit: int = 30,
    ) -> None:
        self.profile = profile
        self.meal_type = meal_type
        # Bounds the size of the model context.
        self.dishes = dishes[:limit]

    def __str__(self) -> str:
        dishes = json.dumps(
            [d.to_dict() for d in self.dishes], indent=2, ensure_ascii=False
        )
        return "\n\n".join(
            [
                PERSONA,
                render_profile(self.profile, self.meal_type),
                CATALOG_TASK.format(meal_type=self.meal_type.value, dishes=dishes),
                render_contract(self.meal_type),
            ]
        )


class KnowledgePrompt:
    """Invent 3 dishes when there is no catalog to choose from."""

    def __init__(self, profile: UserProfile, meal_type: MealType) -> None:
        self.profile = profile
        self.meal_type = meal_type

    def __str__(self) -> str:
        return "\n\n".join(
            [
                PERSONA,
                render_profile(self.profile, self.meal_type),
                KNOWLEDGE_TASK.format(
                    meal_type=self.meal_type.value,
                    placeholder=PLACEHOLDER_IMAGE_BASE,
                ),
                render_contract(self.meal_type),
            ]
        )


CHEF_PERSONA = (
    "You are an expert Indian chef assistant named MyDishGenie. "
    "Your goal is to help users with their cooking questions. "
    "Keep your answers concise, friendly, and helpful. Focus on Indian cuisine."
)

CHEF_GREETING = "Yes, I am MyDishGenie! How can I help you in the kitchen today?"
