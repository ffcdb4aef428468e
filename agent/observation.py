"""Observation returned to the decision service after each action."""

import base64
from dataclasses import dataclass

from decision_service import ComputerCallOutput, ComputerScreenshot, SafetyCheck


@dataclass(frozen=True, slots=True)
class Observation:
    """Fresh screenshot plus the page URL at the time it was taken."""

    screenshot: bytes
    current_url: str

    @property
    def data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.screenshot).decode("ascii")

    def to_call_output(
        self,
        call_id: str,
        acknowledged_safety_checks: list[SafetyCheck] | None = None,
    ) -> ComputerCallOutput:
        """Encode as the computer_call_output input item answering call_id."""
        return ComputerCallOutput(
            call_id=call_id,
            output=ComputerScreenshot(image_url=self.data_url, current_url=self.current_url),
            acknowledged_safety_checks=acknowledged_safety_checks or None,
        )


@dataclass(frozen=True, slots=True)
class PendingCall:
    """Executed computer call whose observation has not been sent back yet."""

    call_id: str
    observation: Observation
    safety_checks: tuple[SafetyCheck, ...] = ()
