import json
import logging

import pytest

from cosign_trust.config import Settings, load_settings
from cosign_trust.exceptions import ConfigurationError, TrustErrorCode
from cosign_trust.logging_config import (
    CosignJSONFormatter,
    ServiceNameFilter,
    get_logger,
    setup_logging,
)


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.SERVICE_NAME == "cosign-trust"
        assert settings.LOG_LEVEL == "INFO"
        assert not settings.json_logs

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("COSIGN_TRUST_LOG_LEVEL", "debug")
        monkeypatch.setenv("COSIGN_TRUST_LOG_FORMAT", "json")
        settings = load_settings()
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.json_logs

    def test_yaml_overrides(self, tmp_path):
        config_file = tmp_path / "cosign-trust.yaml"
        config_file.write_text("service_name: admission\nlog_level: \"OFF\"\n", encoding="utf-8")
        settings = load_settings(config_file)
        assert settings.SERVICE_NAME == "admission"
        assert settings.LOG_LEVEL == "OFF"

    def test_empty_yaml(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("", encoding="utf-8")
        assert load_settings(config_file).SERVICE_NAME == "cosign-trust"

    def test_unknown_log_level(self, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("log_level: chatty\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(config_file)
        assert exc_info.value.error_code is TrustErrorCode.CONFIGURATION_ERROR

    def test_yaml_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_settings(config_file)

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("log_level: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_settings(config_file)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_settings(tmp_path / "missing.yaml")


class TestLogging:
    def test_service_name_filter(self):
        record = logging.LogRecord("cosign_trust", logging.INFO, __file__, 1, "hello", None, None)
        assert ServiceNameFilter("admission").filter(record)
        assert record.service_name == "admission"

    def test_json_formatter(self):
        record = logging.LogRecord("cosign_trust.crypto", logging.DEBUG, __file__, 1, "verified", None, None)
        record.service_name = "admission"
        payload = json.loads(CosignJSONFormatter("%(message)s").format(record))
        assert payload["message"] == "verified"
        assert payload["service"] == "admission"
        assert payload["level"] == "DEBUG"
        assert payload["logger"] == "cosign_trust.crypto"

    def test_setup_logging_text(self, restore_root_logger):
        setup_logging("admission", "debug")
        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert not isinstance(restore_root_logger.handlers[0].formatter, CosignJSONFormatter)

    def test_setup_logging_json(self, restore_root_logger):
        setup_logging("admission", "WARNING", json_format=True)
        assert restore_root_logger.level == logging.WARNING
        assert isinstance(restore_root_logger.handlers[0].formatter, CosignJSONFormatter)

    def test_setup_logging_off(self, restore_root_logger):
        setup_logging("admission", "OFF")
        assert not restore_root_logger.handlers
        assert not get_logger("cosign_trust").isEnabledFor(logging.CRITICAL)
