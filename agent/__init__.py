"""Agent package: turn loop and action dispatch for computer-use browsing."""

from .actions import Action, UnknownAction, parse_action
from .dispatcher import ActionDispatcher
from .loop import AgentResult, Outcome, TurnRecord, run_agent
from .observation import Observation

__all__ = [
    "Action",
    "ActionDispatcher",
    "AgentResult",
    "Observation",
    "Outcome",
    "TurnRecord",
    "UnknownAction",
    "parse_action",
    "run_agent",
]
