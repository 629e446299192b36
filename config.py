"""
Configuration - YAML file plus command-line flags

Example config.yaml:

    mqtt:
      host: broker.local
      port: 1883
      topic: home/livingroom/tv
    cec:
      port: RPI
    devices:
      4: Apple TV
      8: Chromecast
    logging:
      debug: false

Command-line flags override values from the file.
"""

import argparse
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from constants import (
    DEFAULT_CLIENT_ID,
    DEFAULT_DEVICE_NAME,
    DEFAULT_KEEPALIVE,
    DEFAULT_MQTT_PORT,
    MAX_MQTT_PORT,
    MIN_MQTT_PORT,
)


class ConfigError(Exception):
    """Raised for missing or invalid configuration"""


@dataclass
class BridgeConfig:
    host: str
    topic: str
    port: int = DEFAULT_MQTT_PORT
    client_id: str = DEFAULT_CLIENT_ID
    keepalive: int = DEFAULT_KEEPALIVE
    cec_port: Optional[str] = None
    device_name: str = DEFAULT_DEVICE_NAME
    device_names: Dict[int, str] = field(default_factory=dict)
    debug: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cec-mqtt',
        description='Publish TV power state and HDMI input seen on the CEC bus to MQTT',
    )
    parser.add_argument('-c', '--config', help='YAML configuration file')
    parser.add_argument('--host', help='MQTT broker host')
    parser.add_argument('-p', '--port', type=int, help=f'MQTT broker port (default {DEFAULT_MQTT_PORT})')
    parser.add_argument('-t', '--topic', help='MQTT topic for the TV state')
    parser.add_argument('--client-id', help=f'MQTT client id (default {DEFAULT_CLIENT_ID})')
    parser.add_argument('--tls', action='store_true', default=None, help='Use TLS (not supported yet)')
    parser.add_argument('--cec-port', help='CEC adapter port, e.g. RPI (default: first detected adapter)')
    parser.add_argument('-d', '--debug', action='store_true', default=None, help='Enable debug logging')
    return parser


def _load_yaml(config_path: str) -> dict:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file '{config_path}' not found") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing configuration file: {e}") from None

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file '{config_path}' must contain a mapping")
    return data


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _parse_device_names(raw) -> Dict[int, str]:
    if not isinstance(raw, dict):
        raise ConfigError("'devices' must map logical addresses to names")
    names = {}
    for address, name in raw.items():
        try:
            address = int(address)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid logical address in 'devices': {address!r}") from None
        if not 0 <= address <= 0xF:
            raise ConfigError(f"Logical address out of range in 'devices': {address}")
        names[address] = str(name)
    return names


def _as_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def load_config(argv: Optional[List[str]] = None) -> BridgeConfig:
    """
    Build the bridge configuration from the command line and optional YAML file.

    Raises:
        ConfigError: if a required value is missing or a value is invalid
    """
    args = build_parser().parse_args(argv)

    data = _load_yaml(args.config) if args.config else {}
    mqtt_cfg = _section(data, 'mqtt')
    cec_cfg = _section(data, 'cec')
    log_cfg = _section(data, 'logging')

    def pick(cli_value, file_value, default=None):
        if cli_value is not None:
            return cli_value
        if file_value is not None:
            return file_value
        return default

    host = pick(args.host, mqtt_cfg.get('host'))
    if not host:
        raise ConfigError("MQTT broker host is required (--host or mqtt.host)")

    topic = pick(args.topic, mqtt_cfg.get('topic'))
    if not topic:
        raise ConfigError("MQTT topic is required (--topic or mqtt.topic)")
    topic = str(topic)
    if '+' in topic or '#' in topic:
        raise ConfigError(f"MQTT topic must not contain wildcards: {topic}")

    port = _as_int(pick(args.port, mqtt_cfg.get('port'), DEFAULT_MQTT_PORT), "MQTT port")
    if not MIN_MQTT_PORT <= port <= MAX_MQTT_PORT:
        raise ConfigError(f"MQTT port must be between {MIN_MQTT_PORT} and {MAX_MQTT_PORT}, got {port}")

    keepalive = _as_int(pick(None, mqtt_cfg.get('keepalive'), DEFAULT_KEEPALIVE), "MQTT keepalive")
    if keepalive <= 0:
        raise ConfigError(f"MQTT keepalive must be positive, got {keepalive}")

    if pick(args.tls, mqtt_cfg.get('tls'), False):
        raise ConfigError("TLS is not supported yet")

    cec_port = pick(args.cec_port, cec_cfg.get('port'))

    return BridgeConfig(
        host=str(host),
        topic=topic,
        port=port,
        client_id=str(pick(args.client_id, mqtt_cfg.get('client_id'), DEFAULT_CLIENT_ID)),
        keepalive=keepalive,
        cec_port=str(cec_port) if cec_port is not None else None,
        device_name=str(pick(None, cec_cfg.get('device_name'), DEFAULT_DEVICE_NAME)),
        device_names=_parse_device_names(data.get('devices') or {}),
        debug=bool(pick(args.debug, log_cfg.get('debug'), False)),
    )
