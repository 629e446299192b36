import logging
import threading
from typing import Optional

from cec_comms import CECComms, CECCommand
from config import BridgeConfig
from devices import DeviceNames
from publisher import StatePublisher
from state_tracker import TvStateTracker
from tv_state import StateChange


class CECMQTTBridge:
    """
    Passive CEC to MQTT bridge.

    Listens to CEC traffic, tracks the TV state and publishes it as a retained
    JSON message whenever it changes.
    """

    def __init__(self, config: BridgeConfig, comms: CECComms, publisher: StatePublisher,
                 tracker: Optional[TvStateTracker] = None):
        """
        Args:
            config: Bridge configuration
            comms: CECComms instance (RealCECComms or MockCECComms)
            publisher: StatePublisher instance (MQTTPublisher or MockPublisher)
            tracker: State tracker, a fresh one when None
        """
        self.logger = logging.getLogger('CECMQTTBridge')
        self.config = config
        self.comms = comms
        self.publisher = publisher
        self.tracker = tracker if tracker is not None else TvStateTracker()
        self.device_names = DeviceNames(config.device_names)
        self.failed = False
        self._stop_event = threading.Event()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Connect to the broker, then open the CEC adapter"""
        self.logger.info("Starting CEC MQTT bridge")
        self._stop_event.clear()
        self.failed = False

        if not self.publisher.connect():
            self.logger.error("Failed to connect to MQTT broker")
            return False

        if not self.comms.init(self._on_cec_command, self._on_cec_log):
            self.logger.error("Failed to open CEC adapter")
            self.publisher.close()
            return False

        self._running = True
        self.logger.info(f"Bridge started, publishing TV state to '{self.config.topic}'")
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a stop is requested; returns True if it was"""
        return self._stop_event.wait(timeout)

    def request_stop(self) -> None:
        """Ask the bridge to stop (safe from signal handlers and callbacks)"""
        self._stop_event.set()

    def stop(self) -> None:
        """Close the CEC adapter and the broker connection"""
        self._stop_event.set()
        if not self._running:
            return
        self._running = False

        self.logger.info("Stopping CEC MQTT bridge")
        self.comms.close()
        self.publisher.close()
        self.logger.info("Bridge stopped")

    def _on_cec_command(self, cmd_string: str) -> int:
        """Callback from the comms layer for every command seen on the bus"""
        try:
            cmd = CECCommand(cmd_string)
        except ValueError as e:
            self.logger.warning(f"Invalid CEC command: {e}")
            return 0

        try:
            self.logger.debug(f"RX: {self.device_names.describe(cmd)}")

            change = self.tracker.observe(cmd)
            if change is not None:
                self._publish(change)
        except Exception as e:
            self.logger.error(f"Error processing CEC command '{cmd_string}': {e}")

        return 0  # Callback should return 0

    def _on_cec_log(self, message: str) -> None:
        self.logger.debug(f"libcec: {message}")

    def _publish(self, change: StateChange) -> None:
        self.logger.info(f"TV state changed: {change}")

        if self._stop_event.is_set():
            self.logger.debug("Stop requested, not publishing")
            return

        payload = change.current.to_json()
        if not self.publisher.publish(self.config.topic, payload, retain=True):
            # No in-process reconnect: exit and let the supervisor restart us
            self.logger.error("Failed to publish TV state, shutting down")
            self.failed = True
            self.request_stop()
