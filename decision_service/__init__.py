"""Client for the remote computer-use decision service."""

from .base import (
    ComputerCallOutput,
    ComputerScreenshot,
    ContentPart,
    DecisionServiceClient,
    InputItem,
    OutputItem,
    ResponseEnvelope,
    SafetyCheck,
    UsageStats,
    UserMessage,
)
from .openai import OpenAIResponsesClient

__all__ = [
    "ComputerCallOutput",
    "ComputerScreenshot",
    "ContentPart",
    "DecisionServiceClient",
    "InputItem",
    "OpenAIResponsesClient",
    "OutputItem",
    "ResponseEnvelope",
    "SafetyCheck",
    "UsageStats",
    "UserMessage",
]
