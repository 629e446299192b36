"""
Device names - human-readable labels for CEC logical addresses

Used for log output only. Nothing here takes part in state tracking.
"""

from typing import Dict, Mapping, Optional

from cec_comms import CECCommand
from constants import CECOpcode, LogicalAddress


# libcec's default names for each logical address
DEFAULT_DEVICE_NAMES: Dict[int, str] = {
    LogicalAddress.TV: "TV",
    LogicalAddress.RECORDING_DEVICE_1: "Recorder 1",
    LogicalAddress.RECORDING_DEVICE_2: "Recorder 2",
    LogicalAddress.TUNER_1: "Tuner 1",
    LogicalAddress.PLAYBACK_DEVICE_1: "Playback 1",
    LogicalAddress.AUDIO_SYSTEM: "Audio",
    LogicalAddress.TUNER_2: "Tuner 2",
    LogicalAddress.TUNER_3: "Tuner 3",
    LogicalAddress.PLAYBACK_DEVICE_2: "Playback 2",
    LogicalAddress.RECORDING_DEVICE_3: "Recorder 3",
    LogicalAddress.TUNER_4: "Tuner 4",
    LogicalAddress.PLAYBACK_DEVICE_3: "Playback 3",
    LogicalAddress.RESERVED_1: "Reserved 1",
    LogicalAddress.RESERVED_2: "Reserved 2",
    LogicalAddress.FREE_USE: "Free use",
    LogicalAddress.BROADCAST: "Broadcast",
}


class DeviceNames:
    """Logical address to name lookup, with optional per-installation overrides"""

    def __init__(self, overrides: Optional[Mapping[int, str]] = None):
        self._names = dict(DEFAULT_DEVICE_NAMES)
        if overrides:
            for address, name in overrides.items():
                self._names[int(address)] = str(name)

    def name(self, address: int) -> str:
        return self._names.get(address, f"Unknown ({address:X})")

    def describe(self, cmd: CECCommand) -> str:
        """
        Describe a command for traffic logs.

        Example: "TV -> Broadcast: STANDBY [0F:36]"
        """
        try:
            opcode = CECOpcode(cmd.opcode).name
        except ValueError:
            opcode = f"0x{cmd.opcode:02X}"
        return f"{self.name(cmd.initiator)} -> {self.name(cmd.destination)}: {opcode} [{cmd}]"
