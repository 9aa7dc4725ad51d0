"""Tests for configuration functions in core/config.py

Config files are written to pytest's tmp_path; the user's real config is
never read.
"""

import json
import os
from pathlib import Path

import pytest

from core.config import (
    DEFAULT_BRIDGE_NAME,
    DEFAULT_PINCODE,
    USER_CONFIG_FILE,
    BridgeConfig,
    load_bridge_config,
    load_config_file,
    save_bulb_table,
)
from core.errors import ConfigError
from models.types import HubAddress


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / 'config.json'


def write(path: Path, data):
    path.write_text(json.dumps(data))
    return path


class TestConstants:
    def test_user_config_file_path(self):
        """USER_CONFIG_FILE should point to ~/.tradfri_bridge/config.json."""
        assert USER_CONFIG_FILE.name == 'config.json'
        assert '.tradfri_bridge' in str(USER_CONFIG_FILE)


class TestLoadConfigFile:
    def test_missing_file(self, config_file):
        assert load_config_file(config_file) == {}

    def test_invalid_json(self, config_file):
        config_file.write_text('{"bulbs": ')
        with pytest.raises(ConfigError):
            load_config_file(config_file)

    def test_not_an_object(self, config_file):
        write(config_file, ["Floor Lamp"])
        with pytest.raises(ConfigError):
            load_config_file(config_file)


class TestLoadBridgeConfig:
    """Test config file + environment merging."""

    def test_secret_required(self, config_file):
        with pytest.raises(ConfigError, match='TRADFRI_PSK'):
            load_bridge_config(config_file, environ={})

    def test_defaults(self, config_file):
        config = load_bridge_config(config_file, environ={'TRADFRI_PSK': 'abc'})

        assert isinstance(config, BridgeConfig)
        assert config.secret == 'abc'
        assert config.identity == 'Client_identity'
        assert config.bridge_name == DEFAULT_BRIDGE_NAME
        assert config.pincode == DEFAULT_PINCODE
        assert dict(config.bulbs) == {}
        assert config.hub_address is None

    def test_file_values(self, config_file):
        write(config_file, {
            'bridge_name': 'Living Room',
            'bulbs': {'Floor Lamp': 65538, 'Bedside Lamp': '65537'},
            'pincode': '111-22-333',
            'port': 51900,
        })

        config = load_bridge_config(config_file, environ={'TRADFRI_PSK': 'abc'})

        assert config.bridge_name == 'Living Room'
        assert dict(config.bulbs) == {'Floor Lamp': '65538', 'Bedside Lamp': '65537'}
        assert config.pincode == '111-22-333'
        assert config.port == 51900

    def test_environment_overrides_file(self, config_file):
        write(config_file, {'bridge_name': 'From File', 'bulbs': {'A': '1'}})
        environ = {
            'TRADFRI_PSK': 'abc',
            'TRADFRI_BRIDGE_NAME': 'From Env',
            'TRADFRI_BULBS': '{"Floor Lamp": "65538"}',
            'TRADFRI_HUB_HOST': '192.168.1.20',
            'TRADFRI_IDENTITY': 'bridge-1',
        }

        config = load_bridge_config(config_file, environ=environ)

        assert config.bridge_name == 'From Env'
        assert dict(config.bulbs) == {'Floor Lamp': '65538'}
        assert config.identity == 'bridge-1'
        assert config.hub_address == HubAddress('192.168.1.20', 5684)

    def test_keyword_overrides(self, config_file):
        config = load_bridge_config(config_file, environ={'TRADFRI_PSK': 'abc'},
                                    request_timeout=2.0, discovery_timeout=None)

        assert config.request_timeout == 2.0
        assert config.discovery_timeout is not None

    def test_bulb_table_is_read_only(self, config_file):
        write(config_file, {'bulbs': {'Floor Lamp': '65538'}})
        config = load_bridge_config(config_file, environ={'TRADFRI_PSK': 'abc'})

        with pytest.raises(TypeError):
            config.bulbs['Hall'] = '65539'

    @pytest.mark.parametrize('environ', [
        {'TRADFRI_PSK': 'abc', 'TRADFRI_PIN': '12344321'},
        {'TRADFRI_PSK': 'abc', 'TRADFRI_BULBS': '["Floor Lamp"]'},
        {'TRADFRI_PSK': 'abc', 'TRADFRI_BULBS': '{"Floor Lamp": '},
        {'TRADFRI_PSK': 'abc', 'TRADFRI_BULBS': '{"": "65538"}'},
        {'TRADFRI_PSK': 'abc', 'TRADFRI_HUB_PORT': '70000'},
        {'TRADFRI_PSK': 'abc', 'TRADFRI_HUB_PORT': 'coap'},
    ])
    def test_invalid_values(self, config_file, environ):
        with pytest.raises(ConfigError):
            load_bridge_config(config_file, environ=environ)

    @pytest.mark.parametrize('settings', [
        {'secret': 'abc', 'pincode': 12344321},
        {'secret': 'abc', 'identity': 42},
        {'secret': 'abc', 'bridge_name': ['Living Room']},
        {'secret': 'abc', 'hub_host': 192},
        {'secret': 12345},
    ])
    def test_non_string_file_values(self, config_file, settings):
        write(config_file, settings)

        with pytest.raises(ConfigError, match='must be a string'):
            load_bridge_config(config_file, environ={})


class TestSaveBulbTable:
    def test_creates_file(self, tmp_path):
        path = tmp_path / 'nested' / 'config.json'

        save_bulb_table({'Floor Lamp': '65538'}, path)

        assert json.loads(path.read_text()) == {'bulbs': {'Floor Lamp': '65538'}}
        assert oct(os.stat(path).st_mode & 0o777) == oct(0o600)

    def test_merges_existing(self, config_file):
        write(config_file, {'bridge_name': 'Living Room', 'bulbs': {'Bedside Lamp': '65537'}})

        save_bulb_table({'Floor Lamp': 65538}, config_file)

        data = json.loads(config_file.read_text())
        assert data['bridge_name'] == 'Living Room'
        assert data['bulbs'] == {'Bedside Lamp': '65537', 'Floor Lamp': '65538'}
