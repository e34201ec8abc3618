import logging
import random
from typing import Any

from dishgenie.config import Config
from dishgenie.domain.catalog_filter import filter_dishes, total_minutes
from dishgenie.domain.completion import CompletionClient
from dishgenie.domain.errors import (
    CatalogError,
    ModelError,
    ParseError,
    RecommendationError,
)
from dishgenie.domain.models import (
    DishRecommendation,
    DishRecord,
    MealType,
    UserProfile,
    slugify,
)
from dishgenie.domain.normalizer import normalize
from dishgenie.domain.prompts import (
    CHEF_GREETING,
    CHEF_PERSONA,
    CatalogPrompt,
    KnowledgePrompt,
    PLACEHOLDER_IMAGE_BASE,
    placeholder_image_url,
)
from dishgenie.domain.repository import RecipeCatalog


logger = logging.getLogger(__name__)


RECOMMENDATION_COUNT = 3

FALLBACK_REASON = (
    "A popular choice that matches your preferences. "
    "Our AI is currently busy, but we think you'll love this!"
)

PADDING_REASON = "Another good match for your preferences from our recipe collection."

VEGETARIAN_DIETS = {"vegetarian", "vegan"}


def catalog_filters(profile: UserProfile) -> dict[str, str]:
    restrictions = {r.strip().lower() for r in profile.dietary_restrictions}
    if restrictions & VEGETARIAN_DIETS:
        return {"diet": "Vegetarian"}
    return {}


async def catalog_candidates(
    profile: UserProfile,
    meal_type: MealType,
    *,
    catalog: RecipeCatalog | None,
    config: Config,
) -> list[DishRecord]:
    """Catalog dishes that fit the profile, or `CatalogError` if too few do."""
    if catalog is None:
        raise CatalogError("No recipe catalog configured.")

    try:
        dishes = await catalog.fetch(
            filters=catalog_filters(profile), limit=config.catalog_limit
        )
    except CatalogError:
        raise
    except Exception as e:
        raise CatalogError(f"Catalog fetch failed: {e!r}") from e

    if not dishes:
        raise CatalogError("No recipes found in the catalog.")

    filtered = filter_dishes(dishes, profile, meal_type)
    if len(filtered) < config.min_catalog_matches:
        raise CatalogError(
            f"Only {len(filtered)} catalog dishes match the profile, "
            f"need {config.min_catalog_matches}."
        )
    return filtered


def from_catalog(
    dish: DishRecord,
    meal_type: MealType,
    *,
    reason: str = FALLBACK_REASON,
) -> DishRecommendation:
    minutes = total_minutes(dish)
    return DishRecommendation(
        id=slugify(dish.name),
        name=dish.name,
        cuisine=dish.cuisine,
        meal_type=meal_type.value,
        cooking_time=f"{minutes} mins" if minutes else "Varies",
        spice_level="medium",
        difficulty="easy",
        rating=4.3,
        description=dish.description,
        ingredients=dish.ingredients_list,
        instructions=dish.instructions,
        reason=reason,
        image_url=dish.image_url or placeholder_image_url(dish.name),
    )


def local_fallback(
    dishes: list[DishRecord],
    meal_type: MealType,
    *,
    rng: random.Random,
) -> list[DishRecommendation]:
    picked = rng.sample(dishes, RECOMMENDATION_COUNT)
    return [from_catalog(dish, meal_type) for dish in picked]


def _fit_to_count(
    recommendations: list[DishRecommendation],
    candidates: list[DishRecord],
    meal_type: MealType,
) -> list[DishRecommendation]:
    if len(recommendations) != RECOMMENDATION_COUNT:
        logger.warning(
            "Model returned %d recommendations, expected %d",
            len(recommendations),
            RECOMMENDATION_COUNT,
        )
    recommendations = recommendations[:RECOMMENDATION_COUNT]

    chosen = {r.name.lower() for r in recommendations}
    spare = [d for d in candidates if d.name.lower() not in chosen]
    while len(recommendations) < RECOMMENDATION_COUNT and spare:
        recommendations.append(
            from_catalog(spare.pop(0), meal_type, reason=PADDING_REASON)
        )

    if len(recommendations) < RECOMMENDATION_COUNT:
        raise ParseError(
            f"Model returned only {len(recommendations)} usable recommendations."
        )
    return recommendations


def _with_catalog_images(
    recommendations: list[DishRecommendation],
    candidates: list[DishRecord],
) -> list[DishRecommendation]:
    images = {d.name.lower(): d.image_url for d in candidates if d.image_url}
    for rec in recommendations:
        if rec.image_url.startswith(PLACEHOLDER_IMAGE_BASE):
            rec.image_url = images.get(rec.name.lower(), rec.image_url)
    return recommendations


def _with_placeholder_images(
    recommendations: list[DishRecommendation],
) -> list[DishRecommendation]:
    for rec in recommendations:
        rec.image_url = placeholder_image_url(rec.name)
    return recommendations


async def recommend_dishes(
    profile: UserProfile,
    meal_type: MealType,
    *,
    catalog: RecipeCatalog | None,
    completion: CompletionClient,
    config: Config,
    rng: random.Random | None = None,
) -> list[DishRecommendation]:
    """Exactly three dishes for this meal, or `RecommendationError`.

    Catalog trouble switches to the knowledge-only prompt. Model or parse
    trouble falls back to three random catalog dishes when there are any.
    """
    rng = random.Random() if rng is None else rng

    candidates: list[DishRecord] = []
    try:
        candidates = await catalog_candidates(
            profile, meal_type, catalog=catalog, config=config
        )
    except CatalogError as e:
        logger.warning("%s Using the knowledge-only prompt.", e)
        prompt: CatalogPrompt | KnowledgePrompt = KnowledgePrompt(profile, meal_type)
    else:
        prompt = CatalogPrompt(
            profile, meal_type, candidates, limit=config.prompt_dish_limit
        )

    try:
        raw_text = await completion.complete(str(prompt))
        recommendations = normalize(raw_text, meal_type=meal_type)
        if candidates:
            recommendations = _with_catalog_images(
                _fit_to_count(recommendations, candidates, meal_type), candidates
            )
        else:
            recommendations = _with_placeholder_images(
                _fit_to_count(recommendations, [], meal_type)
            )
    except (ModelError, ParseError) as e:
        if not candidates:
            logger.error(
                "Recommendation failed with no catalog to fall back on", exc_info=e
            )
            raise RecommendationError(
                "Failed to generate recommendations.", details=str(e)
            ) from e
        logger.warning(
            "Model path failed (%s). Using %d catalog dishes.", e, len(candidates)
        )
        return local_fallback(candidates, meal_type, rng=rng)

    return recommendations


def chat_messages(history: list[dict[str, Any]]) -> list[dict[str, str]]:
    messages = [
        {"role": "system", "content": CHEF_PERSONA},
        {"role": "assistant", "content": CHEF_GREETING},
    ]
    for msg in history:
        if not isinstance(msg, dict):
            raise ValueError(f"History entry is not a message: {msg!r}")
        role = "assistant" if msg.get("role") == "model" else "user"
        messages.append({"role": role, "content": str(msg.get("text", ""))})
    return messages


async def chef_chat(
    history: list[dict[str, Any]],
    *,
    completion: CompletionClient,
) -> str:
    if not history:
        raise ValueError("Conversation history is empty.")
    reply = await completion.complete(
        chat_messages(history),  # pyright: ignore[reportArgumentType]
        json_output=False,
    )
    return reply.strip()
