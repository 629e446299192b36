import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

import paho.mqtt.client as mqtt

from constants import DEFAULT_CLIENT_ID, DEFAULT_KEEPALIVE, DEFAULT_MQTT_PORT


class StatePublisher(ABC):
    """Abstract interface for publishing state to a message broker"""

    @abstractmethod
    def connect(self) -> bool:
        pass

    @abstractmethod
    def publish(self, topic: str, payload: str, retain: bool = True) -> bool:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class MQTTPublisher(StatePublisher):
    """Fire-and-forget MQTT publisher using paho-mqtt (QoS 1, retained)"""

    def __init__(self, host: str, port: int = DEFAULT_MQTT_PORT,
                 client_id: str = DEFAULT_CLIENT_ID, keepalive: int = DEFAULT_KEEPALIVE,
                 connect_timeout: float = 10.0):
        self.logger = logging.getLogger('MQTTPublisher')
        self.host = host
        self.port = port
        self.client_id = client_id
        self.keepalive = keepalive
        self.connect_timeout = connect_timeout
        self._client = None
        self._connected = threading.Event()
        self._connect_failed = False

    def connect(self) -> bool:
        """Connect to the broker and start the network loop"""
        client = mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=self.client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self.logger)
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_publish = self._on_publish

        self._connected.clear()
        self._connect_failed = False

        self.logger.info(f"Connecting to MQTT broker {self.host}:{self.port}")
        try:
            client.connect(self.host, self.port, keepalive=self.keepalive)
        except Exception as e:
            self.logger.error(f"Unable to connect to MQTT broker {self.host}:{self.port}: {e}")
            return False

        client.loop_start()
        self._client = client

        if not self._connected.wait(self.connect_timeout) or self._connect_failed:
            self.logger.error(f"MQTT broker {self.host}:{self.port} did not accept the connection")
            self.close()
            return False

        self.logger.info("Connected to MQTT broker")
        return True

    def publish(self, topic: str, payload: str, retain: bool = True) -> bool:
        """
        Queue a message for delivery.

        Returns:
            False if paho rejected the message (not connected, queue full, ...)
        """
        client = self._client
        if client is None:
            self.logger.error("MQTT client not connected")
            return False

        # QoS 1 so paho keeps the message for resending after a reconnect
        info = client.publish(topic, payload, qos=1, retain=retain)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.error(f"Failed to publish to {topic}: {mqtt.error_string(info.rc)}")
            return False

        self.logger.debug(f"Published mid={info.mid} to {topic}: {payload}")
        return True

    def close(self) -> None:
        """Disconnect and stop the network loop"""
        client = self._client
        self._client = None
        if client is None:
            return
        try:
            client.disconnect()
        finally:
            client.loop_stop()
        self.logger.info("MQTT client closed")

    def _on_connect(self, client: mqtt.Client, userdata: Any, flags: Any,
                    reason_code: Any, properties: Any) -> None:
        if reason_code.is_failure:
            self.logger.error(f"MQTT connect refused: {reason_code}")
            self._connect_failed = True
        else:
            self.logger.debug(f"MQTT connected: {reason_code}")
        self._connected.set()

    def _on_disconnect(self, client: mqtt.Client, userdata: Any, disconnect_flags: Any,
                       reason_code: Any, properties: Any) -> None:
        if self._client is not None:
            self.logger.warning(f"MQTT disconnected: {reason_code}")

    def _on_publish(self, client: mqtt.Client, userdata: Any, mid: int,
                    reason_code: Any, properties: Any) -> None:
        self.logger.debug(f"MQTT message {mid} delivered")


class MockPublisher(StatePublisher):
    """Mock publisher for testing"""

    def __init__(self):
        self.logger = logging.getLogger('MockPublisher')
        self.published: List[Tuple[str, str, bool]] = []
        self.connected = False
        self.fail_connect = False
        self.fail_publish = False

    def connect(self) -> bool:
        if self.fail_connect:
            self.logger.error("Mock broker unreachable")
            return False
        self.connected = True
        return True

    def publish(self, topic: str, payload: str, retain: bool = True) -> bool:
        if self.fail_publish or not self.connected:
            self.logger.error(f"Mock publish to {topic} failed")
            return False
        self.published.append((topic, payload, retain))
        return True

    def close(self) -> None:
        self.connected = False
