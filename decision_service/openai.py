"""OpenAI Responses API client for the computer-use model."""

import logging
from typing import Any

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from config import Settings
from errors import DecisionServiceError

from .base import DecisionServiceClient

logger = logging.getLogger(__name__)


class OpenAIResponsesClient(DecisionServiceClient):
    """Decision service client backed by the OpenAI Responses API."""

    __slots__ = ("__client",)

    def __init__(
        self,
        settings: Settings,
        display_width: int,
        display_height: int,
        client: AsyncOpenAI | None = None,
    ) -> None:
        super().__init__(display_width, display_height)
        # No SDK retries: a failed call is fatal to the run
        self.__client = client or AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            organization=settings.organization,
            max_retries=0,
        )

    async def _do_api_call(self, request: dict[str, Any]) -> dict[str, Any]:
        """Call responses.create and return the body as a plain dict."""
        try:
            response = await self.__client.responses.create(**request)
        except APIStatusError as e:
            raise DecisionServiceError(
                f"API request failed with status code {e.status_code}: {e.message}"
            ) from e
        except OpenAIError as e:
            raise DecisionServiceError(f"Failed to call the Responses API: {e}") from e

        return response.model_dump(mode="json")
