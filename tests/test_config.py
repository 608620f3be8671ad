"""Tests for lifecycle configuration loading."""

import dataclasses
import os

import pytest

from jboss_harness.config import LifecycleConfig, default_java_home, load_config
from jboss_harness.management.configuration import (
    ArgsConfigSource,
    ConfigurationManager,
    DefaultConfigSource,
    EnvConfigSource,
    FileConfigSource,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of precedence tests."""
    for key in list(os.environ):
        if key.startswith("JBOSS_HARNESS_"):
            monkeypatch.delenv(key)
    monkeypatch.delenv("JBOSS_HOME", raising=False)
    monkeypatch.setenv("JAVA_HOME", "/opt/java")


class TestLifecycleConfig:

    def test_defaults(self):
        config = LifecycleConfig()
        assert config.host == "localhost"
        assert config.port == 8080
        assert config.jboss_conf == "default"
        assert config.lazy is False
        assert config.request_timeout == 120.0
        assert config.poll_interval == 1.0
        assert config.base_url == "http://localhost:8080"

    def test_read_only(self):
        config = LifecycleConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.port = 9090

    def test_from_dict_coerces_strings(self):
        config = LifecycleConfig.from_dict({
            "port": "8180",
            "lazy": "yes",
            "wait": "90",
            "terminate_delay": "2.5",
        })
        assert config.port == 8180
        assert config.lazy is True
        assert config.wait == 90.0
        assert config.terminate_delay == 2.5

    def test_from_dict_rejects_bad_boolean(self):
        with pytest.raises(ValueError):
            LifecycleConfig.from_dict({"lazy": "sometimes"})

    def test_from_dict_ignores_unknown_keys(self):
        config = LifecycleConfig.from_dict({"host": "jboss.local", "colour": "blue"})
        assert config.host == "jboss.local"


class TestLoadConfig:
    """Precedence: defaults < file < environment < overrides."""

    def test_java_home_from_environment(self):
        assert default_java_home() == "/opt/java"
        assert load_config().java_home == "/opt/java"

    def test_jboss_home_from_environment(self, monkeypatch):
        monkeypatch.setenv("JBOSS_HOME", "/opt/jboss-5.1")
        assert load_config().jboss_home == "/opt/jboss-5.1"

    def test_file_values(self, tmp_path):
        config_file = tmp_path / "harness.yaml"
        config_file.write_text("jboss:\n  port: 8180\n  jboss_conf: all\n  lazy: true\n")

        config = load_config(config_file)
        assert config.port == 8180
        assert config.jboss_conf == "all"
        assert config.lazy is True

    def test_file_env_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_JBOSS_ROOT", "/srv/jboss")
        monkeypatch.setenv("TEST_JBOSS_PORT", "8280")
        config_file = tmp_path / "harness.yaml"
        config_file.write_text("jboss_home: ${TEST_JBOSS_ROOT}/current\nport: ${TEST_JBOSS_PORT}\n")

        config = load_config(config_file)
        assert config.jboss_home == "/srv/jboss/current"
        assert config.port == 8280

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "harness.yaml"
        config_file.write_text("port: 8180\nhost: filehost\n")
        monkeypatch.setenv("JBOSS_HARNESS_PORT", "8380")

        config = load_config(config_file)
        assert config.port == 8380
        assert config.host == "filehost"

    def test_overrides_win(self, tmp_path, monkeypatch):
        config_file = tmp_path / "harness.yaml"
        config_file.write_text("port: 8180\n")
        monkeypatch.setenv("JBOSS_HARNESS_PORT", "8380")

        config = load_config(config_file, port=8480, host=None)
        assert config.port == 8480
        assert config.host == "localhost"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")
        assert config.port == 8080


class TestConfigurationManager:

    def test_priority_order(self):
        manager = ConfigurationManager()
        manager.add_source(ArgsConfigSource({"port": 3}))
        manager.add_source(DefaultConfigSource({"port": 1, "host": "default"}))
        manager.add_source(EnvConfigSource(prefix="TEST_HARNESS_UNSET_"))

        assert manager.resolve_config() == {"port": 3, "host": "default"}

    def test_env_source_strips_prefix(self, monkeypatch):
        monkeypatch.setenv("TEST_HARNESS_JVM_ARGS", "-Xmx2g")
        assert EnvConfigSource(prefix="TEST_HARNESS_").load() == {"jvm_args": "-Xmx2g"}

    def test_unreadable_file_yields_empty_config(self, tmp_path):
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("port: [unclosed\n")
        assert FileConfigSource(config_file).load() == {}

    def test_non_mapping_file_ignored(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- one\n- two\n")
        assert FileConfigSource(config_file).load() == {}

    def test_origins_track_winning_source(self, tmp_path, monkeypatch):
        config_file = tmp_path / "harness.yaml"
        config_file.write_text("port: 8180\njboss_conf: all\n")
        monkeypatch.setenv("TEST_HARNESS_PORT", "8380")

        manager = ConfigurationManager()
        manager.add_source(DefaultConfigSource({"port": 8080, "host": "localhost"}))
        manager.add_source(FileConfigSource(config_file))
        manager.add_source(EnvConfigSource(prefix="TEST_HARNESS_"))

        assert manager.resolve_config() == {"port": "8380", "host": "localhost", "jboss_conf": "all"}
        assert manager.origins == {
            "port": "env TEST_HARNESS_*",
            "host": "defaults",
            "jboss_conf": f"file {config_file}",
        }

    def test_unavailable_file_contributes_nothing(self, tmp_path):
        manager = ConfigurationManager()
        manager.add_source(DefaultConfigSource({"port": 8080}))
        manager.add_source(FileConfigSource(tmp_path / "missing.yaml"))

        assert manager.resolve_config() == {"port": 8080}
        assert manager.origins == {"port": "defaults"}
