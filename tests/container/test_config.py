"""Tests for provisioning configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from code_sandbox.container.config import (
    DEFAULT_IMAGE,
    DEFAULT_PULL_TIMEOUT,
    ContainerSpec,
    ProvisionerConfig,
)
from code_sandbox.errors import ConfigurationError


class TestContainerSpec:
    """Tests for ContainerSpec."""

    def test_interactive_defaults(self) -> None:
        """TTY on, stdin open and not closed after the first attach."""
        config = ContainerSpec(image="alpine:3.20").to_engine_config()

        assert config == {
            "Image": "alpine:3.20",
            "WorkingDir": "/app",
            "Tty": True,
            "OpenStdin": True,
            "StdinOnce": False,
            "HostConfig": {},
        }

    def test_host_config_is_copied(self) -> None:
        spec = ContainerSpec(image="alpine:3.20")
        spec.to_engine_config()["HostConfig"]["Memory"] = 1
        assert spec.host_config == {}


class TestProvisionerConfig:
    """Tests for ProvisionerConfig."""

    def test_default_values(self) -> None:
        config = ProvisionerConfig()

        assert config.default_image == DEFAULT_IMAGE == "python:3.12-slim-bookworm"
        assert config.working_dir == "/app"
        assert config.pull_timeout == DEFAULT_PULL_TIMEOUT == 300.0

    @pytest.mark.parametrize("requested", [None, "", 42])
    def test_resolve_image_falls_back(self, requested) -> None:
        assert ProvisionerConfig().resolve_image(requested) == DEFAULT_IMAGE

    def test_resolve_image_keeps_request(self) -> None:
        """No local validation: the engine decides what is a valid reference."""
        assert ProvisionerConfig().resolve_image("not a valid ref!") == "not a valid ref!"

    def test_container_spec_uses_working_dir(self) -> None:
        spec = ProvisionerConfig(working_dir="/workspace").container_spec("alpine:3.20")
        assert spec.image == "alpine:3.20"
        assert spec.working_dir == "/workspace"


class TestFromEnv:
    """Tests for ProvisionerConfig.from_env()."""

    def test_empty_environment(self, monkeypatch) -> None:
        for var in (
            "SANDBOX_DEFAULT_IMAGE",
            "SANDBOX_WORKING_DIR",
            "SANDBOX_PULL_TIMEOUT",
            "SANDBOX_CLIENT_TIMEOUT",
        ):
            monkeypatch.delenv(var, raising=False)

        assert ProvisionerConfig.from_env() == ProvisionerConfig()

    def test_reads_variables(self, monkeypatch) -> None:
        monkeypatch.setenv("SANDBOX_DEFAULT_IMAGE", "node:22-slim")
        monkeypatch.setenv("SANDBOX_WORKING_DIR", "/work")
        monkeypatch.setenv("SANDBOX_PULL_TIMEOUT", "120")
        monkeypatch.setenv("SANDBOX_CLIENT_TIMEOUT", "15.5")

        config = ProvisionerConfig.from_env()

        assert config.default_image == "node:22-slim"
        assert config.working_dir == "/work"
        assert config.pull_timeout == 120.0
        assert config.client_timeout == 15.5

    @pytest.mark.parametrize("value", ["soon", "0", "-5"])
    def test_invalid_timeout(self, monkeypatch, value: str) -> None:
        monkeypatch.setenv("SANDBOX_PULL_TIMEOUT", value)
        with pytest.raises(ConfigurationError, match="SANDBOX_PULL_TIMEOUT"):
            ProvisionerConfig.from_env()

    def test_pull_timeout_above_five_minutes_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("SANDBOX_PULL_TIMEOUT", "3600")
        with pytest.raises(ConfigurationError, match="SANDBOX_PULL_TIMEOUT must be at most 300"):
            ProvisionerConfig.from_env()

    def test_pull_timeout_at_five_minutes_allowed(self, monkeypatch) -> None:
        monkeypatch.setenv("SANDBOX_PULL_TIMEOUT", "300")
        assert ProvisionerConfig.from_env().pull_timeout == 300.0

    def test_sub_second_client_timeout(self, monkeypatch) -> None:
        monkeypatch.setenv("SANDBOX_CLIENT_TIMEOUT", "0.5")
        assert ProvisionerConfig.from_env().client_timeout == 0.5


class TestFromYaml:
    """Tests for ProvisionerConfig.from_yaml()."""

    def test_loads_values(self, tmp_path: Path) -> None:
        path = tmp_path / "sandbox.yaml"
        path.write_text("default_image: ruby:3.3-slim\npull_timeout: 60\nunknown_key: 1\n")

        config = ProvisionerConfig.from_yaml(path)

        assert config.default_image == "ruby:3.3-slim"
        assert config.pull_timeout == 60.0
        assert config.working_dir == "/app"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "sandbox.yaml"
        path.write_text("")
        assert ProvisionerConfig.from_yaml(path) == ProvisionerConfig()

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "sandbox.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            ProvisionerConfig.from_yaml(path)

    def test_invalid_timeout(self, tmp_path: Path) -> None:
        path = tmp_path / "sandbox.yaml"
        path.write_text("pull_timeout: never\n")
        with pytest.raises(ConfigurationError, match="pull_timeout"):
            ProvisionerConfig.from_yaml(path)

    def test_pull_timeout_above_five_minutes_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "sandbox.yaml"
        path.write_text("pull_timeout: 3600\n")
        with pytest.raises(ConfigurationError, match="pull_timeout must be at most 300"):
            ProvisionerConfig.from_yaml(path)

    @pytest.mark.parametrize(
        "content, key",
        [
            ("default_image: 3\n", "default_image"),
            ("working_dir: [a, b]\n", "working_dir"),
            ("default_image: {name: alpine}\n", "default_image"),
        ],
    )
    def test_non_string_values_rejected(self, tmp_path: Path, content: str, key: str) -> None:
        """Images and paths must be strings before they reach the engine."""
        path = tmp_path / "sandbox.yaml"
        path.write_text(content)
        with pytest.raises(ConfigurationError, match=f"{key} must be a string"):
            ProvisionerConfig.from_yaml(path)

    def test_null_values_use_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "sandbox.yaml"
        path.write_text("default_image:\nworking_dir: ''\n")

        config = ProvisionerConfig.from_yaml(path)

        assert config.default_image == DEFAULT_IMAGE
        assert config.working_dir == "/app"
