from enum import IntEnum


class PowerStatus(IntEnum):
    """CEC power status values (libcec codes)"""
    ON = 0x00
    STANDBY = 0x01
    IN_TRANSITION_STANDBY_TO_ON = 0x02
    IN_TRANSITION_ON_TO_STANDBY = 0x03
    UNKNOWN = 0x99


POWER_STATUS_LABELS = {
    PowerStatus.ON: "on",
    PowerStatus.STANDBY: "standby",
    PowerStatus.IN_TRANSITION_STANDBY_TO_ON: "in transition from standby to on",
    PowerStatus.IN_TRANSITION_ON_TO_STANDBY: "in transition from on to standby",
    PowerStatus.UNKNOWN: "unknown",
}


class CECOpcode(IntEnum):
    """Common CEC opcodes"""
    IMAGE_VIEW_ON = 0x04
    TEXT_VIEW_ON = 0x0D
    STANDBY = 0x36
    USER_CONTROL_PRESSED = 0x44
    USER_CONTROL_RELEASE = 0x45
    GIVE_OSD_NAME = 0x46
    SET_OSD_NAME = 0x47
    GIVE_AUDIO_STATUS = 0x71
    REPORT_AUDIO_STATUS = 0x7A
    ROUTING_CHANGE = 0x80
    ACTIVE_SOURCE = 0x82
    GIVE_PHYSICAL_ADDRESS = 0x83
    REPORT_PHYSICAL_ADDRESS = 0x84
    REQUEST_ACTIVE_SOURCE = 0x85
    SET_STREAM_PATH = 0x86
    DEVICE_VENDOR_ID = 0x87
    GIVE_DEVICE_VENDOR_ID = 0x8C
    GIVE_DEVICE_POWER_STATUS = 0x8F
    REPORT_POWER_STATUS = 0x90
    CEC_VERSION = 0x9E
    GET_CEC_VERSION = 0x9F
    VENDOR_COMMAND_WITH_ID = 0xA0


class LogicalAddress(IntEnum):
    """CEC logical addresses"""
    TV = 0x00
    RECORDING_DEVICE_1 = 0x01
    RECORDING_DEVICE_2 = 0x02
    TUNER_1 = 0x03
    PLAYBACK_DEVICE_1 = 0x04
    AUDIO_SYSTEM = 0x05
    TUNER_2 = 0x06
    TUNER_3 = 0x07
    PLAYBACK_DEVICE_2 = 0x08
    RECORDING_DEVICE_3 = 0x09
    TUNER_4 = 0x0A
    PLAYBACK_DEVICE_3 = 0x0B
    RESERVED_1 = 0x0C
    RESERVED_2 = 0x0D
    FREE_USE = 0x0E
    BROADCAST = 0x0F


DEFAULT_DEVICE_NAME = "cec-mqtt"
DEFAULT_CLIENT_ID = "cec-mqtt"
DEFAULT_MQTT_PORT = 1883
DEFAULT_KEEPALIVE = 60
MIN_MQTT_PORT = 1025
MAX_MQTT_PORT = 65535
