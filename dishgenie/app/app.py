import contextlib
import functools
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

from databases import Database
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from dishgenie.ajolt import in_thread
from dishgenie.config import CatalogBackend, Config, Env
from dishgenie.domain.completion import CompletionClient
from dishgenie.domain.errors import (
    CatalogError,
    ConfigurationError,
    ModelError,
    RecommendationError,
)
from dishgenie.domain.models import MealType, UserProfile
from dishgenie.domain.repository import (
    FirestoreRecipeCatalog,
    RecipeCatalog,
    SqlRecipeCatalog,
    init_firestore,
)
from dishgenie.domain.services import chef_chat, recommend_dishes
from dishgenie.logs import configure_logging


logger = logging.getLogger(__name__)


type Payload = dict[str, Any] | list[Any]


def aJSONResponse(route: Callable[..., Awaitable[Payload | tuple[Payload, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> JSONResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            data, code = resp, 200
        else:
            data, code = resp
        return JSONResponse(data, status_code=code)

    return wrapper


def error(message: str, details: str = "", code: int = 500) -> tuple[Payload, int]:
    return {"error": message, "details": details}, code


async def read_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        raise ValueError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object.")
    return body


def completion_client(request: Request) -> CompletionClient:
    state = request.app.state
    if state.completion is None:
        state.completion = CompletionClient.from_config(state.config)
    return state.completion


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@aJSONResponse
async def recommend(request: Request) -> Payload | tuple[Payload, int]:
    config: Config = request.app.state.config
    try:
        config.require_api_key()
    except ConfigurationError as e:
        return error(str(e))

    try:
        body = await read_body(request)
        profile_data = body.get("userProfile")
        if not isinstance(profile_data, dict):
            raise ValueError("Expected a userProfile object.")
        meal_type = (
            MealType.parse(str(body["mealType"]))
            if body.get("mealType")
            else MealType.now()
        )
    except ValueError as e:
        return error("Invalid recommendation request.", str(e), 400)

    profile = UserProfile.from_dict(profile_data)
    try:
        recommendations = await recommend_dishes(
            profile,
            meal_type,
            catalog=request.app.state.catalog,
            completion=completion_client(request),
            config=config,
        )
    except RecommendationError as e:
        return error(e.message, e.details)

    return [r.to_dict() for r in recommendations]


@aJSONResponse
async def chef(request: Request) -> Payload | tuple[Payload, int]:
    config: Config = request.app.state.config
    try:
        config.require_api_key()
    except ConfigurationError as e:
        return error(str(e))

    try:
        body = await read_body(request)
        history = body.get("history")
        if not isinstance(history, list) or not history:
            raise ValueError("Expected a non-empty history list.")
        if not all(isinstance(msg, dict) for msg in history):
            raise ValueError("Each history entry must be an object with role and text.")
    except ValueError as e:
        return error("Invalid chat request.", str(e), 400)

    try:
        reply = await chef_chat(history, completion=completion_client(request))
    except ModelError as e:
        logger.error("Chef chat failed", exc_info=e)
        return error("Failed to get a response from the AI chef.", e.message)

    return {"response": reply}


async def open_catalog(config: Config) -> tuple[RecipeCatalog | None, Database | None]:
    match config.catalog_backend:
        case CatalogBackend.sql:
            db = Database(config.db_url)
            try:
                await db.connect()
            except Exception as e:
                logger.warning("Recipe database unavailable: %r", e)
                return None, None
            catalog = SqlRecipeCatalog(db)
            if config.env == Env.local:
                await catalog.create_table()
            return catalog, db
        case CatalogBackend.firestore:
            try:
                client = await in_thread(init_firestore, config.firebase_credentials)
            except CatalogError as e:
                logger.warning("Recipe catalog unavailable: %s", e)
                return None, None
            return FirestoreRecipeCatalog(
                client, collection=config.recipes_collection
            ), None


@contextlib.asynccontextmanager
async def lifespan(app: Starlette) -> AsyncIterator[None]:
    db = None
    if app.state.catalog is None:
        app.state.catalog, db = await open_catalog(app.state.config)
    yield
    if db is not None:
        await db.disconnect()


def create_app(
    config: Config | None = None,
    *,
    catalog: RecipeCatalog | None = None,
    completion: CompletionClient | None = None,
) -> Starlette:
    config = Config() if config is None else config
    configure_logging(config)

    app = Starlette(
        debug=True if config.env == Env.local else False,
        routes=[
            Route("/health", health),
            Route("/api/recommend", recommend, methods=["POST"]),
            Route("/api/chef-chat", chef, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.catalog = catalog
    app.state.completion = completion
    return app


app = create_app()
