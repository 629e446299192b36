import pytest

from config import ConfigError, load_config


@pytest.fixture
def config_file(tmp_path):
    """Fixture writing a YAML configuration file"""
    def write(text):
        path = tmp_path / "config.yaml"
        path.write_text(text)
        return str(path)
    return write


class TestLoadConfig:
    """Test configuration loading from the command line and YAML"""

    def test_minimal_command_line(self):
        """Test that host and topic are enough"""
        config = load_config(["--host", "broker.local", "--topic", "home/tv"])

        assert config.host == "broker.local"
        assert config.topic == "home/tv"
        assert config.port == 1883
        assert config.client_id == "cec-mqtt"
        assert config.cec_port is None
        assert config.debug is False

    def test_missing_host(self):
        """Test that the broker host is required"""
        with pytest.raises(ConfigError, match="host"):
            load_config(["--topic", "home/tv"])

    def test_missing_topic(self):
        """Test that the topic is required"""
        with pytest.raises(ConfigError, match="topic"):
            load_config(["--host", "broker.local"])

    def test_wildcard_topic(self):
        """Test that wildcard topics are rejected"""
        with pytest.raises(ConfigError):
            load_config(["--host", "broker.local", "--topic", "home/#"])

    @pytest.mark.parametrize("port", ["1024", "65536", "0"])
    def test_port_out_of_range(self, port):
        """Test the allowed port range"""
        with pytest.raises(ConfigError, match="port"):
            load_config(["--host", "broker.local", "--topic", "home/tv", "--port", port])

    @pytest.mark.parametrize("port", ["1025", "8883", "65535"])
    def test_port_in_range(self, port):
        """Test ports at and inside the range bounds"""
        config = load_config(["--host", "broker.local", "--topic", "home/tv", "--port", port])
        assert config.port == int(port)

    def test_tls_not_supported(self):
        """Test that asking for TLS is a configuration error"""
        with pytest.raises(ConfigError, match="TLS"):
            load_config(["--host", "broker.local", "--topic", "home/tv", "--tls"])

    def test_debug_flag(self):
        """Test the debug toggle"""
        config = load_config(["--host", "broker.local", "--topic", "home/tv", "-d"])
        assert config.debug is True

    def test_yaml_file(self, config_file):
        """Test loading all settings from a YAML file"""
        path = config_file(
            "mqtt:\n"
            "  host: broker.local\n"
            "  port: 1884\n"
            "  topic: home/livingroom/tv\n"
            "  client_id: livingroom\n"
            "  keepalive: 30\n"
            "cec:\n"
            "  port: RPI\n"
            "  device_name: pi-cec\n"
            "devices:\n"
            "  4: Apple TV\n"
            "  8: Chromecast\n"
            "logging:\n"
            "  debug: true\n"
        )

        config = load_config(["--config", path])

        assert config.host == "broker.local"
        assert config.port == 1884
        assert config.topic == "home/livingroom/tv"
        assert config.client_id == "livingroom"
        assert config.keepalive == 30
        assert config.cec_port == "RPI"
        assert config.device_name == "pi-cec"
        assert config.device_names == {4: "Apple TV", 8: "Chromecast"}
        assert config.debug is True

    def test_command_line_overrides_yaml(self, config_file):
        """Test that flags take precedence over the file"""
        path = config_file("mqtt:\n  host: broker.local\n  topic: home/tv\n  port: 1884\n")

        config = load_config(["-c", path, "--port", "1999", "--topic", "other/tv"])

        assert config.host == "broker.local"
        assert config.port == 1999
        assert config.topic == "other/tv"

    def test_missing_file(self, tmp_path):
        """Test that a missing config file is an error"""
        with pytest.raises(ConfigError, match="not found"):
            load_config(["--config", str(tmp_path / "missing.yaml")])

    def test_invalid_yaml(self, config_file):
        """Test that an unparsable config file is an error"""
        path = config_file("mqtt: [unterminated\n")
        with pytest.raises(ConfigError):
            load_config(["--config", path])

    def test_invalid_device_address(self, config_file):
        """Test that device name overrides must use valid logical addresses"""
        path = config_file("mqtt:\n  host: b\n  topic: t\ndevices:\n  16: Nope\n")
        with pytest.raises(ConfigError, match="devices"):
            load_config(["--config", path])

    def test_null_values_use_defaults(self, config_file):
        """Test that keys present but left empty fall back to their defaults"""
        path = config_file(
            "mqtt:\n  host: b\n  topic: t\n  keepalive:\n"
            "cec:\n  device_name: null\n"
        )

        config = load_config(["--config", path])

        assert config.device_name == "cec-mqtt"
        assert config.keepalive == 60

    def test_empty_file(self, config_file):
        """Test that an empty file still requires host and topic"""
        path = config_file("")
        with pytest.raises(ConfigError):
            load_config(["--config", path])
