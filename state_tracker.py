import logging
from typing import Optional

from cec_comms import CECCommand
from classifier import classify_and_fold
from tv_state import StateChange, TvState


class TvStateTracker:
    """
    Holds the current TV state and detects genuine changes.

    The bus is noisy and devices re-announce unchanged state, so a change is
    only reported when a field actually differs.

    Not thread-safe: observe() must be called from a single, non-reentrant
    callback path (libcec delivers commands serially).
    """

    def __init__(self, initial: Optional[TvState] = None):
        self.logger = logging.getLogger('TvStateTracker')
        self._initial = initial if initial is not None else TvState()
        self._state = self._initial

    @property
    def state(self) -> TvState:
        return self._state

    def observe(self, cmd: CECCommand) -> Optional[StateChange]:
        """
        Fold a received command into the state.

        Args:
            cmd: Received CEC command

        Returns:
            StateChange if the state differs from before the command, None otherwise
        """
        previous = self._state
        current = classify_and_fold(previous, cmd)

        if current == previous:
            self.logger.debug(f"No state change from {cmd}")
            return None

        self._state = current
        return StateChange(previous=previous, current=current)

    def reset(self) -> None:
        """Forget everything observed so far"""
        self._state = self._initial
