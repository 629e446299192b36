"""
TV state - the snapshot published to MQTT

A TvState is an immutable value; trackers replace it rather than mutate it.
"""

import json
from dataclasses import dataclass

from constants import POWER_STATUS_LABELS, PowerStatus


@dataclass(frozen=True)
class TvState:
    """Power status and active HDMI input of the TV (0 = input not yet seen)"""
    power_status: PowerStatus = PowerStatus.UNKNOWN
    hdmi_input: int = 0

    @property
    def power_label(self) -> str:
        return POWER_STATUS_LABELS.get(self.power_status, "unknown")

    def to_payload(self) -> dict:
        return {"power_state": self.power_label, "hdmi_input": self.hdmi_input}

    def to_json(self) -> str:
        """Render the MQTT payload, e.g. {"power_state":"on","hdmi_input":3}"""
        return json.dumps(self.to_payload(), separators=(",", ":"))

    def __str__(self):
        return f"{self.power_label}, HDMI {self.hdmi_input}"


@dataclass(frozen=True)
class StateChange:
    previous: TvState
    current: TvState

    def __str__(self):
        return f"{self.previous} -> {self.current}"
