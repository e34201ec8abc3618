import logging
from typing import Self

import openai
from openai.types.chat import ChatCompletionMessageParam

from dishgenie.config import Config
from dishgenie.domain.errors import (
    FallbackExhaustedError,
    ModelError,
    NonRetryableModelError,
    RetryableModelError,
)


logger = logging.getLogger(__name__)


type Prompt = str | list[ChatCompletionMessageParam]


def openai_client_factory(config: Config) -> openai.AsyncClient:
    # The SDK retries 429/5xx on its own by default; the fallback model is our
    # only retry.
    return openai.AsyncClient(
        api_key=config.require_api_key(),
        base_url=config.openrouter_base_url,
        default_headers={
            "HTTP-Referer": config.app_url,
            "X-Title": config.app_title,
        },
        max_retries=0,
    )


def classify(error: openai.OpenAIError) -> ModelError:
    status_code = error.status_code if isinstance(error, openai.APIStatusError) else None
    if status_code is not None and (status_code == 429 or status_code >= 500):
        return RetryableModelError(str(error), status_code=status_code)
    return NonRetryableModelError(str(error), status_code=status_code)


class CompletionClient:
    def __init__(
        self,
        *,
        openai_client: openai.AsyncClient,
        primary_model: str,
        fallback_model: str,
    ) -> None:
        self.openai_client = openai_client
        self.primary_model = primary_model
        self.fallback_model = fallback_model

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        openai_client: openai.AsyncClient | None = None,
    ) -> Self:
        return cls(
            openai_client=(
                openai_client_factory(config) if openai_client is None else openai_client
            ),
            primary_model=config.primary_model,
            fallback_model=config.fallback_model,
        )

    async def _complete_once(
        self,
        messages: list[ChatCompletionMessageParam],
        *,
        model: str,
        json_output: bool,
    ) -> str:
        try:
            if json_output:
                resp = await self.openai_client.chat.completions.create(
                    model=model,
                    messages=messages,
                    response_format={"type": "json_object"},
                )
            else:
                resp = await self.openai_client.chat.completions.create(
                    model=model,
                    messages=messages,
                )
        except openai.OpenAIError as e:
            raise classify(e) from e

        if not resp.choices:
            raise NonRetryableModelError(f"{model} returned no choices.")
        content = resp.choices[0].message.content
        if not content or not content.strip():
            raise NonRetryableModelError(f"{model} did not return a valid response.")
        return content

    async def complete(
        self,
        prompt: Prompt,
        *,
        primary_model: str | None = None,
        fallback_model: str | None = None,
        json_output: bool = True,
    ) -> str:
        """Ask the primary model, then the fallback model once if it was busy.

        Rate limits and server errors on the primary go straight to the fallback
        model, with no backoff. Any other failure is a defect in the request and
        is raised as is.
        """
        primary_model = self.primary_model if primary_model is None else primary_model
        fallback_model = (
            self.fallback_model if fallback_model is None else fallback_model
        )
        messages: list[ChatCompletionMessageParam] = (
            [{"role": "user", "content": prompt}] if isinstance(prompt, str) else prompt
        )

        try:
            return await self._complete_once(
                messages, model=primary_model, json_output=json_output
            )
        except RetryableModelError as primary_error:
            logger.warning(
                "Primary model %s failed with status %s, trying %s",
                primary_model,
                primary_error.status_code,
                fallback_model,
            )
            try:
                return await self._complete_once(
                    messages, model=fallback_model, json_output=json_output
                )
            except ModelError as fallback_error:
                raise FallbackExhaustedError(primary_error, fallback_error) from (
                    fallback_error
                )
