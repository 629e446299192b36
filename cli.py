#!/usr/bin/env python3
"""
cec-mqtt - Publish TV state from the HDMI CEC bus to MQTT

Listens passively to CEC traffic and publishes the TV power status and
active HDMI input as a retained JSON message whenever they change.
"""
import logging
import signal
import sys

from bridge import CECMQTTBridge
from cec_comms import RealCECComms
from config import ConfigError, load_config
from publisher import MQTTPublisher


def setup_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def main(argv=None) -> int:
    try:
        config = load_config(argv)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.debug)
    logger = logging.getLogger('CECMQTT')

    logger.info("Starting cec-mqtt")

    comms = RealCECComms(device_name=config.device_name, port=config.cec_port)
    publisher = MQTTPublisher(
        host=config.host,
        port=config.port,
        client_id=config.client_id,
        keepalive=config.keepalive,
    )
    bridge = CECMQTTBridge(config, comms, publisher)

    # Setup signal handlers for graceful shutdown
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        bridge.request_stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if not bridge.start():
        logger.error("Failed to start bridge")
        return 1

    logger.info("cec-mqtt running, waiting for events...")

    # libcec and paho callbacks run in background threads
    while not bridge.wait(1.0):
        pass

    bridge.stop()

    if bridge.failed:
        logger.error("cec-mqtt stopped after a publish failure")
        return 1

    logger.info("cec-mqtt stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
