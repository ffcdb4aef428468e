"""Wire models and base abstraction for the decision service client."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from errors import DecisionServiceError

logger = logging.getLogger(__name__)

_FAILED_STATUSES = ("failed", "cancelled")


@dataclass(slots=True)
class UsageStats:
    """Token usage statistics from one or more decision service calls."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    reasoning_tokens: int = 0

    def __iadd__(self, other: "UsageStats") -> "UsageStats":
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.cache_read_tokens += other.cache_read_tokens
        self.reasoning_tokens += other.reasoning_tokens
        return self


class SafetyCheck(BaseModel):
    """Advisory attached to a computer call that the service wants acknowledged."""

    id: str
    code: str | None = None
    message: str | None = None


# --- Request side ---


class UserMessage(BaseModel):
    """Plain user text input (the goal on the first turn)."""

    type: Literal["message"] = "message"
    role: Literal["user"] = "user"
    content: str


class ComputerScreenshot(BaseModel):
    """Screenshot returned for a computer call, as a data URL."""

    type: Literal["input_image"] = "input_image"
    image_url: str
    current_url: str | None = None


class ComputerCallOutput(BaseModel):
    """Result of a computer call, correlated to it by call_id."""

    type: Literal["computer_call_output"] = "computer_call_output"
    call_id: str
    output: ComputerScreenshot
    acknowledged_safety_checks: list[SafetyCheck] | None = None


InputItem = UserMessage | ComputerCallOutput


# --- Response side ---


class ContentPart(BaseModel):
    """Text part of a message or reasoning summary."""

    model_config = ConfigDict(extra="ignore")

    type: str
    text: str | None = None
    refusal: str | None = None


class OutputItem(BaseModel):
    """Single item of a response's output list.

    The action payload is kept as a raw mapping; the agent turns it into a typed action.
    """

    model_config = ConfigDict(extra="ignore")

    type: str
    id: str | None = None
    call_id: str | None = None
    status: str | None = None
    action: dict[str, Any] | None = None
    role: str | None = None
    content: list[ContentPart] | None = None
    summary: list[ContentPart] | None = None
    pending_safety_checks: list[SafetyCheck] = Field(default_factory=list)

    @property
    def is_assistant_message(self) -> bool:
        return self.role == "assistant" and bool(self.content)

    @property
    def text(self) -> str:
        """Concatenated text of the content parts (refusals included)."""
        parts = [p.text or p.refusal or "" for p in self.content or []]
        return "".join(parts).strip()

    @property
    def summary_text(self) -> str:
        return " ".join(p.text for p in self.summary or [] if p.text).strip()


class _TokenDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cached_tokens: int = 0
    reasoning_tokens: int = 0


class ResponseUsage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    input_tokens: int = 0
    output_tokens: int = 0
    input_tokens_details: _TokenDetails | None = None
    output_tokens_details: _TokenDetails | None = None

    def to_stats(self) -> UsageStats:
        return UsageStats(
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            cache_read_tokens=self.input_tokens_details.cached_tokens if self.input_tokens_details else 0,
            reasoning_tokens=self.output_tokens_details.reasoning_tokens if self.output_tokens_details else 0,
        )


class ResponseEnvelope(BaseModel):
    """Structured response of one decision service call."""

    model_config = ConfigDict(extra="ignore")

    id: str
    status: str | None = None
    model: str | None = None
    error: dict[str, Any] | None = None
    output: list[OutputItem] = Field(default_factory=list)
    usage: ResponseUsage | None = None

    @property
    def usage_stats(self) -> UsageStats:
        return self.usage.to_stats() if self.usage else UsageStats()


def describe_inputs(inputs: list[InputItem]) -> str:
    """One line per input item, without image payloads."""
    lines = []
    for i, item in enumerate(inputs, 1):
        if isinstance(item, UserMessage):
            lines.append(f"#{i} message role={item.role} content={item.content[:100]!r}")
        else:
            acked = len(item.acknowledged_safety_checks or [])
            lines.append(
                f"#{i} computer_call_output call_id={item.call_id} url={item.output.current_url} "
                f"image={len(item.output.image_url)} chars acked_checks={acked}"
            )
    return "\n".join(lines)


def describe_response(response: ResponseEnvelope) -> str:
    """One line per output item of a response."""
    lines = [f"response id={response.id} status={response.status} items={len(response.output)}"]
    for i, item in enumerate(response.output, 1):
        if item.action is not None:
            line = f"#{i} {item.type} call_id={item.call_id} action={item.action}"
        elif item.content:
            line = f"#{i} {item.type} role={item.role} text={item.text[:100]!r}"
        elif item.summary:
            line = f"#{i} {item.type} summary={item.summary_text[:100]!r}"
        else:
            line = f"#{i} {item.type}"
        for check in item.pending_safety_checks:
            line += f"\n    safety check {check.code}: {check.message}"
        lines.append(line)
    return "\n".join(lines)


class DecisionServiceClient(ABC):
    """Base abstract class for decision service clients.

    Each call to send() is exactly one round trip. Retries are left to the transport
    below this class and are disabled by default.
    """

    __slots__ = ("_display_width", "_display_height")

    ENVIRONMENT = "browser"
    TRUNCATION = "auto"

    def __init__(self, display_width: int, display_height: int) -> None:
        self._display_width = display_width
        self._display_height = display_height

    @property
    def tool_declaration(self) -> dict[str, Any]:
        """Computer tool declaration telling the service the viewport it is driving."""
        return {
            "type": "computer_use_preview",
            "display_width": self._display_width,
            "display_height": self._display_height,
            "environment": self.ENVIRONMENT,
        }

    @abstractmethod
    async def _do_api_call(self, request: dict[str, Any]) -> dict[str, Any]:
        """Make the actual API call.

        Args:
            request: JSON-ready request body

        Returns:
            JSON-ready response body

        Raises:
            DecisionServiceError: On transport errors or non-success statuses
        """
        ...

    def build_request(self, model: str, previous_response_id: str | None, inputs: list[InputItem]) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": model,
            "input": [item.model_dump(exclude_none=True) for item in inputs],
            "tools": [self.tool_declaration],
            "truncation": self.TRUNCATION,
        }
        if previous_response_id:
            request["previous_response_id"] = previous_response_id
        return request

    async def send(
        self,
        model: str,
        previous_response_id: str | None,
        inputs: list[InputItem],
    ) -> ResponseEnvelope:
        """Send one request and return the parsed response.

        Args:
            model: Model identifier
            previous_response_id: Continuation token from the previous response, None on the first turn
            inputs: Input items for this turn

        Raises:
            DecisionServiceError: If the call fails, the body is malformed, or the response failed
        """
        request = self.build_request(model, previous_response_id, inputs)
        logger.debug("Request (previous_response_id=%s):\n%s", previous_response_id, describe_inputs(inputs))

        body = await self._do_api_call(request)

        try:
            response = ResponseEnvelope.model_validate(body)
        except ValidationError as e:
            raise DecisionServiceError(f"Malformed response body: {e}") from e

        logger.debug("Response:\n%s", describe_response(response))

        if response.status in _FAILED_STATUSES:
            detail = response.error.get("message") if response.error else None
            raise DecisionServiceError(f"Response {response.id} {response.status}: {detail or 'no details'}")
        if response.status == "incomplete":
            logger.warning("Response %s is incomplete", response.id)

        return response
