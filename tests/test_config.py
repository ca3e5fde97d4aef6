"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from apim_sync.config import (
    AzureConfig,
    LoggingConfig,
    SyncConfig,
    config_from_env,
    load_config_from_yaml,
)


class TestYamlConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "azure:\n"
            "  subscription: sub-1\n"
            "  resource_group: rg-1\n"
            "  service_name: contoso\n"
            "apihub:\n"
            "  project: my-project\n"
            "  region: us-central1\n"
            "paths:\n"
            "  base_dir: /data\n"
            "only_new: true\n"
        )

        config = load_config_from_yaml(path)

        assert config.azure.service_name == "contoso"
        assert config.azure.api_version == "2022-08-01"
        assert config.apihub.region == "us-central1"
        assert config.paths.base_dir == "/data"
        assert config.paths.export_dir == "export"
        assert config.only_new is True

    def test_env_var_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_AZURE_TOKEN", "from-env")
        path = tmp_path / "config.yaml"
        path.write_text("azure:\n  token: ${TEST_AZURE_TOKEN}\n")

        assert load_config_from_yaml(path).azure.token == "from-env"

    def test_unset_env_var(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TEST_UNSET_VAR", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("azure:\n  token: ${TEST_UNSET_VAR}\n")

        with pytest.raises(ValueError, match="TEST_UNSET_VAR"):
            load_config_from_yaml(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_from_yaml(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="Empty configuration"):
            load_config_from_yaml(path)


class TestEnvConfig:
    def test_conventional_variables(self):
        config = config_from_env(
            {
                "AZURE_SUBSCRIPTION_ID": "sub-1",
                "AZURE_RESOURCE_GROUP": "rg-1",
                "AZURE_SERVICE_NAME": "contoso",
                "AZURE_CLIENT_ID": "client",
                "AZURE_CLIENT_SECRET": "secret",
                "AZURE_TENANT_ID": "tenant",
                "APIGEE_PROJECT": "my-project",
                "APIGEE_REGION": "us-central1",
            }
        )

        assert config.azure.missing_fields() == []
        assert config.azure.has_client_credentials
        assert config.apihub.missing_fields() == []

    def test_empty_environment(self):
        config = config_from_env({})

        assert config.azure.missing_fields() == ["subscription", "resource group", "service name"]
        assert config.apihub.missing_fields() == ["project", "region"]


class TestValidation:
    def test_log_level_normalised(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="chatty")

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            SyncConfig(http={"timeout": 0})

    def test_partial_credentials(self):
        assert not AzureConfig(client_id="c", client_secret="s").has_client_credentials
