"""Tests for configuration."""

import pytest

from trace_agent.config import (
    MAX_LABEL_VALUE_SIZE,
    ServiceContext,
    TraceWriterConfig,
    UncaughtExceptionPolicy,
    resolve_project_id,
)
from trace_agent.errors import ConfigInvalid

ENV_VARS = [
    "GCLOUD_PROJECT",
    "GCLOUD_TRACE_LOGLEVEL",
    "GAE_SERVICE",
    "GAE_MODULE_NAME",
    "GAE_VERSION",
    "GAE_MODULE_VERSION",
    "GAE_MINOR_VERSION",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove agent environment variables and run from an empty directory."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestTraceWriterConfig:
    """Tests for TraceWriterConfig."""

    def test_defaults(self):
        """Test default settings."""
        config = TraceWriterConfig()

        assert config.project_id is None
        assert config.buffer_size == 1000
        assert config.flush_delay_seconds == 30
        assert config.on_uncaught_exception == "ignore"
        assert config.service_context == ServiceContext()
        assert config.stack_trace_limit == 10
        assert config.maximum_label_value_size == 512

    def test_config_is_frozen(self):
        """Test that config cannot change after construction."""
        config = TraceWriterConfig()

        with pytest.raises(AttributeError):
            config.buffer_size = 5  # type: ignore[misc]

    @pytest.mark.parametrize("value", ["ignore", "flush", "flushAndExit"])
    def test_validate_accepts_policies(self, value):
        """Test that every known policy is accepted."""
        config = TraceWriterConfig(on_uncaught_exception=value)
        config.validate()
        assert config.uncaught_exception_policy == UncaughtExceptionPolicy(value)

    def test_validate_rejects_unknown_policy(self):
        """Test that an unknown policy is rejected."""
        with pytest.raises(ConfigInvalid, match="flushAndExit"):
            TraceWriterConfig(on_uncaught_exception="crash").validate()

    def test_validate_rejects_non_positive_values(self):
        """Test that buffer size and flush delay must be positive."""
        with pytest.raises(ConfigInvalid):
            TraceWriterConfig(buffer_size=0).validate()
        with pytest.raises(ConfigInvalid):
            TraceWriterConfig(flush_delay_seconds=0).validate()

    def test_config_invalid_is_value_error(self):
        """Test that ConfigInvalid can be caught as ValueError."""
        with pytest.raises(ValueError):
            TraceWriterConfig(on_uncaught_exception="crash").validate()

    def test_label_value_limit_is_clamped(self):
        """Test that the label limit never exceeds the API maximum."""
        assert TraceWriterConfig(maximum_label_value_size=10).label_value_limit == 10
        assert (
            TraceWriterConfig(maximum_label_value_size=1 << 20).label_value_limit
            == MAX_LABEL_VALUE_SIZE
        )


class TestFromEnv:
    """Tests for TraceWriterConfig.from_env()."""

    def test_env_project_overrides_config(self, clean_env):
        """Test that GCLOUD_PROJECT takes precedence."""
        clean_env.setenv("GCLOUD_PROJECT", "env-project")

        config = TraceWriterConfig.from_env(project_id="config-project")

        assert config.project_id == "env-project"

    def test_overrides_applied(self, clean_env):
        """Test that keyword overrides reach the config."""
        config = TraceWriterConfig.from_env(buffer_size=7, project_id="p")

        assert config.buffer_size == 7
        assert config.project_id == "p"

    def test_service_context_from_env(self, clean_env):
        """Test that App Engine variables fill the service context."""
        clean_env.setenv("GAE_SERVICE", "svc")
        clean_env.setenv("GAE_VERSION", "v1")
        clean_env.setenv("GAE_MINOR_VERSION", "42")

        config = TraceWriterConfig.from_env()

        assert config.service_context == ServiceContext(
            service="svc", version="v1", minor_version="42"
        )

    def test_log_level_from_env(self, clean_env):
        """Test that GCLOUD_TRACE_LOGLEVEL is read."""
        clean_env.setenv("GCLOUD_TRACE_LOGLEVEL", "4")

        assert TraceWriterConfig.from_env().log_level == 4

    def test_reads_env_file(self, clean_env, tmp_path):
        """Test that a .env file is loaded."""
        env_file = tmp_path / "custom.env"
        env_file.write_text("GCLOUD_PROJECT=file-project\n")
        # Make monkeypatch remove whatever load_dotenv sets
        clean_env.setenv("GCLOUD_PROJECT", "placeholder")
        clean_env.delenv("GCLOUD_PROJECT")

        config = TraceWriterConfig.from_env(env_file=env_file)

        assert config.project_id == "file-project"


class TestResolveProjectId:
    """Tests for resolve_project_id()."""

    def test_env_value_wins(self):
        assert resolve_project_id("env", "config") == "env"

    def test_falls_back_to_config(self):
        assert resolve_project_id(None, "config") == "config"

    def test_empty_is_none(self):
        assert resolve_project_id("", "") is None
