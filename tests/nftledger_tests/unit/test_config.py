"""
Tests for ledger configuration loading.
"""

import io
import logging

import pytest

from nftledger.core.config import (
    ConfigManager,
    ConfigurationError,
    LedgerConfig,
    env_overrides,
)
from nftledger.core.structured_logger import ROOT_LOGGER_NAME
from nftledger.core.types import IdKind


class TestLedgerConfig:
    def test_defaults(self):
        config = LedgerConfig()
        config.validate()
        assert config.max_supply is None
        assert config.id_kind is IdKind.U128
        assert config.first_token_id == 1
        assert config.purge_on_burn is True
        assert config.strict_approvals is False

    @pytest.mark.parametrize(
        "settings,message",
        [
            ({"max_supply": -1}, "max_supply"),
            ({"id_kind": IdKind.BYTES}, "id_kind"),
            ({"id_kind": IdKind.U8, "first_token_id": 256}, "first_token_id"),
            ({"first_token_id": -1}, "first_token_id"),
            ({"log_level": "LOUD"}, "log level"),
        ],
    )
    def test_validate_rejects(self, settings, message):
        with pytest.raises(ConfigurationError, match=message):
            LedgerConfig(**settings).validate()

    def test_from_mapping_parses_strings(self):
        config = LedgerConfig.from_mapping(
            {
                "max_supply": "100",
                "id_kind": "u32",
                "first_token_id": "5",
                "strict_approvals": "yes",
                "purge_on_burn": "off",
                "log_level": "debug",
            }
        )
        assert config.max_supply == 100
        assert config.id_kind is IdKind.U32
        assert config.first_token_id == 5
        assert config.strict_approvals is True
        assert config.purge_on_burn is False
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("marker", ["", "none", "Unlimited", "inf"])
    def test_unbounded_markers(self, marker):
        assert LedgerConfig.from_mapping({"max_supply": marker}).max_supply is None

    def test_unknown_setting_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown ledger settings"):
            LedgerConfig.from_mapping({"max_suply": 3})

    def test_bad_boolean_rejected(self):
        with pytest.raises(ConfigurationError, match="Invalid boolean"):
            LedgerConfig.from_mapping({"purge_on_burn": "maybe"})

    def test_bad_id_kind_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown id kind"):
            LedgerConfig.from_mapping({"id_kind": "u7"})

    def test_to_dict(self):
        data = LedgerConfig(max_supply=3, id_kind=IdKind.U64).to_dict()
        assert data["max_supply"] == 3
        assert data["id_kind"] == "u64"


def test_env_overrides_only_picks_known_settings():
    environ = {
        "NFTLEDGER_MAX_SUPPLY": "10",
        "NFTLEDGER_UNRELATED": "x",
        "PATH": "/usr/bin",
    }
    assert env_overrides(environ) == {"max_supply": "10"}


class TestConfigManager:
    def test_defaults_without_sources(self):
        manager = ConfigManager(environ={})
        assert manager.ledger == LedgerConfig()

    def test_loads_yaml_section(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("ledger:\n  max_supply: 50\n  id_kind: u64\n")

        manager = ConfigManager(config_file=path, environ={})

        assert manager.get("max_supply") == 50
        assert manager.get("id_kind") is IdKind.U64

    def test_precedence_file_env_overrides(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("ledger:\n  max_supply: 50\n  strict_approvals: true\n")
        environ = {"NFTLEDGER_MAX_SUPPLY": "20", "NFTLEDGER_PURGE_ON_BURN": "false"}

        manager = ConfigManager(
            config_file=path, environ=environ, overrides={"max_supply": 7}
        )

        assert manager.ledger.max_supply == 7
        assert manager.ledger.purge_on_burn is False
        assert manager.ledger.strict_approvals is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigManager(config_file=tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("ledger: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigManager(config_file=path, environ={})

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigManager(config_file=path, environ={})

    def test_invalid_value_from_env(self):
        with pytest.raises(ConfigurationError):
            ConfigManager(environ={"NFTLEDGER_MAX_SUPPLY": "-4"})

    def test_to_dict(self):
        manager = ConfigManager(environ={}, overrides={"id_kind": "u16"})
        assert manager.to_dict()["id_kind"] == "u16"

    def test_setup_logging_uses_configured_level(self):
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        previous = package_logger.level
        manager = ConfigManager(environ={}, overrides={"log_level": "warning"})
        try:
            logger = manager.setup_logging(stream=io.StringIO())
            assert logger is package_logger
            assert logger.level == logging.WARNING
        finally:
            for handler in list(package_logger.handlers):
                if getattr(handler, "_nftledger_json", False):
                    package_logger.removeHandler(handler)
            package_logger.setLevel(previous)
