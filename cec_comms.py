import logging
import re
from typing import Callable, Optional
from abc import ABC, abstractmethod

from constants import DEFAULT_DEVICE_NAME

# Each byte is exactly two hex digits, as libcec prints them
_HEX_BYTE = re.compile(r"[0-9A-Fa-f]{2}")


class CECCommand:
    """Represents a CEC command received from the bus"""
    def __init__(self, command_string: str):
        """
        Create a CECCommand from a received command string.

        Args:
            command_string: Command string in format "XX:YY:ZZ..." where XX is initiator+destination.
                libcec's ">>" traffic prefix is accepted and stripped.
        """
        command_string = command_string.strip()
        if command_string.startswith(">>"):
            command_string = command_string.lstrip(">").strip()

        # Store the normalised command string
        self.command_string = command_string

        parts = self.command_string.split(':')
        if len(parts) < 2:
            raise ValueError(f"Invalid CEC command format: {command_string}")

        if not all(_HEX_BYTE.fullmatch(p) for p in parts):
            raise ValueError(f"Invalid CEC command format: {command_string}")
        values = [int(p, 16) for p in parts]

        # First byte: high nibble = initiator, low nibble = destination
        self.initiator = (values[0] >> 4) & 0xF
        self.destination = values[0] & 0xF
        self.opcode = values[1]
        self.parameters = bytes(values[2:])

    @classmethod
    def build(cls, initiator: int, destination: int, opcode: int, parameters: bytes = b'') -> 'CECCommand':
        """
        Create a CECCommand from its fields.

        Args:
            initiator: CEC logical address of the sending device (0-15)
            destination: CEC logical address of destination device (0-15)
            opcode: CEC opcode
            parameters: Optional parameter bytes

        Returns:
            CECCommand instance
        """
        first_byte = (initiator << 4) | destination
        cmd_parts = [f"{first_byte:02X}", f"{opcode:02X}"]
        cmd_parts.extend(f"{b:02X}" for b in parameters)

        instance = cls.__new__(cls)
        instance.initiator = initiator
        instance.destination = destination
        instance.opcode = opcode
        instance.parameters = bytes(parameters)
        instance.command_string = ":".join(cmd_parts)
        return instance

    def __eq__(self, other):
        if not isinstance(other, CECCommand):
            return NotImplemented
        return self.command_string.upper() == other.command_string.upper()

    def __hash__(self):
        return hash(self.command_string.upper())

    def __repr__(self):
        return f"CECCommand({self.command_string!r})"

    def __str__(self):
        """Return the command string"""
        return self.command_string


class CECComms(ABC):
    """Abstract interface for receive-only CEC communication"""

    @abstractmethod
    def init(self, on_command: Callable[[str], int],
             on_log: Optional[Callable[[str], None]] = None) -> bool:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class RealCECComms(CECComms):
    """Real CEC communication using libcec Python bindings"""

    def __init__(self, device_name: str = DEFAULT_DEVICE_NAME, port: Optional[str] = None):
        """
        Args:
            device_name: OSD name announced by the libcec client
            port: Adapter port to open (e.g. "RPI"); the first detected adapter when None
        """
        self.logger = logging.getLogger('RealCECComms')
        self.device_name = device_name
        self.port = port
        self._cec = None
        self._lib = None
        self._config = None
        self._on_command_callback = None
        self._on_log_callback = None

    def init(self, on_command: Callable[[str], int],
             on_log: Optional[Callable[[str], None]] = None) -> bool:
        """Initialize the CEC adapter"""
        self._on_command_callback = on_command
        self._on_log_callback = on_log

        try:
            import cec
            self._cec = cec

            # Passive client: never claims active source
            self._config = cec.libcec_configuration()
            self._config.strDeviceName = self.device_name
            self._config.bActivateSource = 0
            self._config.deviceTypes.Add(cec.CEC_DEVICE_TYPE_RECORDING_DEVICE)
            self._config.clientVersion = cec.LIBCEC_VERSION_CURRENT

            self._config.SetCommandCallback(self._on_libcec_command)
            if on_log is not None:
                self._config.SetLogCallback(self._on_libcec_log)

            self._lib = cec.ICECAdapter.Create(self._config)
            if not self._lib:
                self.logger.error("Failed to create CEC adapter")
                return False

            self.logger.info(f"libCEC version {self._lib.VersionToString(self._config.serverVersion)} loaded")

            port = self.port
            if port is None:
                adapters = self._lib.DetectAdapters()
                if not adapters or len(adapters) == 0:
                    self.logger.error("No CEC adapters found")
                    return False
                port = adapters[0].strComName
                self.logger.info(f"Found CEC adapter on port: {port}")

            if not self._lib.Open(port):
                self.logger.error(f"Unable to open CEC adapter on port {port}")
                return False

            self.logger.info("CEC adapter initialized successfully")
            return True

        except ImportError:
            self.logger.error("libcec Python bindings not found. See README.md for installation instructions")
            return False
        except Exception as e:
            self.logger.error(f"Failed to initialize CEC: {e}")
            return False

    def close(self) -> None:
        """Close the CEC adapter"""
        if self._lib is not None:
            try:
                self._lib.Close()
                self.logger.info("CEC adapter closed")
            except Exception as e:
                self.logger.error(f"Error closing CEC adapter: {e}")
            self._lib = None

    def _on_libcec_command(self, cmd_string: str) -> int:
        """Internal callback from libcec - forwards to the bridge"""
        if self._on_command_callback:
            return self._on_command_callback(cmd_string)
        return 0

    def _on_libcec_log(self, level: int, time: int, message: str) -> int:
        """Internal log callback from libcec"""
        if self._on_log_callback:
            self._on_log_callback(message)
        return 0


class MockCECComms(CECComms):
    """Mock CEC communication for testing"""

    def __init__(self):
        self.logger = logging.getLogger('MockCECComms')
        self._on_command_callback = None
        self._on_log_callback = None
        self._initialized = False
        self.fail_init = False
        self.closed = False

    def init(self, on_command: Callable[[str], int],
             on_log: Optional[Callable[[str], None]] = None) -> bool:
        """Initialize mock CEC"""
        if self.fail_init:
            self.logger.error("Mock CEC failed to initialize")
            return False
        self._on_command_callback = on_command
        self._on_log_callback = on_log
        self._initialized = True
        self.closed = False
        self.logger.info("Mock CEC initialized")
        return True

    def close(self) -> None:
        """Close mock CEC"""
        self._initialized = False
        self.closed = True
        self.logger.info("Mock CEC closed")

    def simulate_received_command(self, cmd_string: str) -> Optional[int]:
        """Simulate receiving a CEC command (for testing)"""
        if self._on_command_callback:
            return self._on_command_callback(cmd_string)
        return None

    def simulate_log_message(self, message: str) -> None:
        """Simulate a libcec log line (for testing)"""
        if self._on_log_callback:
            self._on_log_callback(message)
