from typing import Any

import pytest
from starlette.testclient import TestClient

from dishgenie.app.app import create_app
from dishgenie.domain.errors import FallbackExhaustedError, NonRetryableModelError
from dishgenie.domain.models import MealType

from fakes import (
    FakeCatalog,
    FakeCompletion,
    make_config,
    make_dish,
    recommendations_text,
)


PROFILE = {
    "name": "Meera",
    "birthPlace": "Gujarat",
    "currentLocation": "Maharashtra",
    "age": "29",
    "favoriteCuisines": ["Gujarati"],
    "dietaryRestrictions": ["vegetarian"],
    "spiceLevel": "mild",
    "cookingTime": "quick",
    "familySize": "2",
    "allergies": "",
    "additionalPreferences": "",
}

SNACKS = ["Dhokla", "Khandvi", "Thepla", "Sev Khamani"]


def client_for(
    *replies: str | Exception, **config: Any
) -> tuple[TestClient, FakeCompletion]:
    completion = FakeCompletion(*replies)
    catalog = FakeCatalog([make_dish(n, course="Snack") for n in SNACKS])
    app = create_app(
        make_config(**config),
        catalog=catalog,
        completion=completion,  # pyright: ignore[reportArgumentType]
    )
    return TestClient(app), completion


def test_health() -> None:
    client, _ = client_for()
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_recommend() -> None:
    reply = recommendations_text("Dhokla", "Khandvi", "Thepla")
    client, completion = client_for(reply)
    resp = client.post(
        "/api/recommend", json={"userProfile": PROFILE, "mealType": "Snacks"}
    )

    assert resp.status_code == 200
    body = resp.json()
    assert [d["name"] for d in body] == ["Dhokla", "Khandvi", "Thepla"]
    assert set(body[0]) == {
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
    }
    assert "Meera" in completion.prompts[0]


def test_recommend_defaults_meal_type_to_the_clock(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(MealType, "now", classmethod(lambda cls: cls.SNACKS))
    reply = recommendations_text("Dhokla", "Khandvi", "Thepla")
    client, completion = client_for(reply)

    resp = client.post("/api/recommend", json={"userProfile": PROFILE})

    assert resp.status_code == 200
    assert "Meal Type: Snacks" in completion.prompts[0]


def test_recommend_falls_back_to_catalog_dishes() -> None:
    client, _ = client_for(NonRetryableModelError("Error code: 400", status_code=400))
    resp = client.post(
        "/api/recommend", json={"userProfile": PROFILE, "mealType": "snacks"}
    )

    assert resp.status_code == 200
    assert len(resp.json()) == 3
    assert {d["name"] for d in resp.json()} <= set(SNACKS)


def test_recommend_survives_non_finite_numbers() -> None:
    client, _ = client_for('[{"name": "Dhokla", "rating": NaN, "cookingTime": Infinity}]')
    resp = client.post(
        "/api/recommend", json={"userProfile": PROFILE, "mealType": "Snacks"}
    )

    assert resp.status_code == 200
    assert len(resp.json()) == 3
    assert all(d["rating"] == 4.3 for d in resp.json())


def test_recommend_failure() -> None:
    client, _ = client_for(
        FallbackExhaustedError(
            NonRetryableModelError("primary is busy", status_code=429),
            NonRetryableModelError("fallback is down", status_code=503),
        )
    )
    resp = client.post(
        "/api/recommend", json={"userProfile": PROFILE, "mealType": "Dinner"}
    )

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Failed to generate recommendations."
    assert "primary is busy" in body["details"]
    assert "fallback is down" in body["details"]


def test_recommend_without_api_key() -> None:
    client, completion = client_for(openrouter_api_key=None)
    resp = client.post(
        "/api/recommend", json={"userProfile": PROFILE, "mealType": "Lunch"}
    )

    assert resp.status_code == 500
    assert "API key" in resp.json()["error"]
    assert completion.prompts == []


@pytest.mark.parametrize(
    "body",
    (
        {"userProfile": PROFILE, "mealType": "Brunch"},
        {"mealType": "Lunch"},
        {"userProfile": "Meera"},
        ["not", "an", "object"],
    ),
)
def test_recommend_bad_request(body: Any) -> None:
    client, completion = client_for()
    resp = client.post("/api/recommend", json=body)

    assert resp.status_code == 400
    assert set(resp.json()) == {"error", "details"}
    assert completion.prompts == []


def test_recommend_invalid_json() -> None:
    client, _ = client_for()
    resp = client.post(
        "/api/recommend",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400


def test_chef_chat() -> None:
    client, completion = client_for("Soak the besan batter for ten minutes.")
    resp = client.post(
        "/api/chef-chat",
        json={"history": [{"role": "user", "text": "Why is my dhokla dense?"}]},
    )

    assert resp.status_code == 200
    assert resp.json() == {"response": "Soak the besan batter for ten minutes."}
    assert completion.json_output == [False]


def test_chef_chat_failure() -> None:
    client, _ = client_for(NonRetryableModelError("Error code: 401", status_code=401))
    resp = client.post(
        "/api/chef-chat", json={"history": [{"role": "user", "text": "Hello"}]}
    )

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to get a response from the AI chef.",
        "details": "Error code: 401",
    }


@pytest.mark.parametrize(
    "body",
    (
        {"history": []},
        {"history": "hello"},
        {"history": ["hello"]},
        {"history": [{"role": "user", "text": "Hi"}, 42]},
        {},
    ),
)
def test_chef_chat_bad_request(body: Any) -> None:
    client, completion = client_for()
    resp = client.post("/api/chef-chat", json=body)

    assert resp.status_code == 400
    assert set(resp.json()) == {"error", "details"}
    assert completion.prompts == []
