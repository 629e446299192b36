"""
Command Classifier - folds one CEC command into the TV state

Only two kinds of traffic are relevant:
- Commands sent by the TV itself, which report its power status and the
  stream path it has selected.
- Broadcasts from other devices announcing themselves as active source.

Everything else leaves the state untouched. Commands with missing parameter
bytes are ignored rather than rejected.
"""

from dataclasses import replace

from cec_comms import CECCommand
from constants import CECOpcode, LogicalAddress, PowerStatus
from tv_state import TvState


def _hdmi_input(parameters: bytes):
    """HDMI port from the first byte of a physical address (high nibble)"""
    if len(parameters) < 1:
        return None
    return (parameters[0] >> 4) & 0xF


def _power_status(parameters: bytes):
    if len(parameters) < 1:
        return None
    try:
        return PowerStatus(parameters[0])
    except ValueError:
        # libcec reports undefined codes as "unknown"
        return PowerStatus.UNKNOWN


def _fold_from_tv(current: TvState, cmd: CECCommand) -> TvState:
    opcode = cmd.opcode

    if opcode == CECOpcode.REPORT_POWER_STATUS:
        status = _power_status(cmd.parameters)
        if status is None:
            return current
        return replace(current, power_status=status)

    # Some TVs announce standby with a vendor command instead of <Standby>
    if opcode in (CECOpcode.STANDBY, CECOpcode.VENDOR_COMMAND_WITH_ID):
        return replace(current, power_status=PowerStatus.STANDBY)

    # ...and announce power on by reporting their physical address
    if opcode == CECOpcode.REPORT_PHYSICAL_ADDRESS:
        return replace(current, power_status=PowerStatus.ON)

    if opcode == CECOpcode.SET_STREAM_PATH:
        hdmi_input = _hdmi_input(cmd.parameters)
        if hdmi_input is None:
            return current
        return replace(current, hdmi_input=hdmi_input)

    return current


def _fold_broadcast(current: TvState, cmd: CECCommand) -> TvState:
    if cmd.opcode == CECOpcode.ACTIVE_SOURCE:
        hdmi_input = _hdmi_input(cmd.parameters)
        if hdmi_input is None:
            return current
        return replace(current, hdmi_input=hdmi_input)

    return current


def classify_and_fold(current: TvState, cmd: CECCommand) -> TvState:
    """
    Apply a received command to the TV state.

    Args:
        current: State before the command
        cmd: Received CEC command

    Returns:
        The next state; equal to ``current`` when the command carries nothing relevant
    """
    if cmd.initiator == LogicalAddress.TV:
        return _fold_from_tv(current, cmd)
    if cmd.destination == LogicalAddress.BROADCAST:
        return _fold_broadcast(current, cmd)
    return current
