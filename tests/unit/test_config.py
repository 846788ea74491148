# tests/unit/test_config.py

import pytest

from sqs_integration.config import DEFAULT_CODE_PATH, get_config
from sqs_integration.exceptions import (
    CodeBundleNotFoundError,
    ConfigurationError,
    InvalidRuntimeError,
    VisibilityTimeoutError,
)


def test_get_config_uses_defaults(clean_config_env):
    """Tests that every variable falls back to its default value."""
    config = get_config()

    assert config.stack_name == "SqsIntegrationStack"
    assert config.service_name == "sqs-integration"
    assert config.visibility_timeout_seconds == 300
    assert config.handler == "lambda_handler.handler"
    assert config.runtime == "python3.12"
    assert config.code_path == str(DEFAULT_CODE_PATH)
    assert config.function_timeout_seconds == 30
    assert config.log_level == "INFO"
    assert config.powertools_layer_version == 7
    assert config.batch_size == 10
    assert config.report_batch_item_failures is True
    assert config.runtime_layer_tag == "python312"


def test_get_config_happy_path(clean_config_env, tmp_path):
    """Tests that configuration loads correctly when all env vars are set."""
    monkeypatch = clean_config_env
    monkeypatch.setenv("STACK_NAME", "OrdersStack")
    monkeypatch.setenv("SERVICE_NAME", "orders")
    monkeypatch.setenv("QUEUE_VISIBILITY_TIMEOUT_SECONDS", "600")
    monkeypatch.setenv("FUNCTION_HANDLER", "app.main")
    monkeypatch.setenv("FUNCTION_RUNTIME", "python3.13")
    monkeypatch.setenv("FUNCTION_CODE_PATH", str(tmp_path))
    monkeypatch.setenv("FUNCTION_TIMEOUT_SECONDS", "120")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("POWERTOOLS_LAYER_VERSION", "3")
    monkeypatch.setenv("SQS_BATCH_SIZE", "5")
    monkeypatch.setenv("REPORT_BATCH_ITEM_FAILURES", "no")

    config = get_config()

    assert config.stack_name == "OrdersStack"
    assert config.service_name == "orders"
    assert config.visibility_timeout_seconds == 600
    assert config.handler == "app.main"
    assert config.runtime == "python3.13"
    assert config.code_path == str(tmp_path)
    assert config.function_timeout_seconds == 120
    assert config.log_level == "DEBUG"
    assert config.powertools_layer_version == 3
    assert config.batch_size == 5
    assert config.report_batch_item_failures is False


@pytest.mark.parametrize(
    "name, value",
    [
        ("QUEUE_VISIBILITY_TIMEOUT_SECONDS", "not-a-number"),
        ("QUEUE_VISIBILITY_TIMEOUT_SECONDS", "-1"),
        ("QUEUE_VISIBILITY_TIMEOUT_SECONDS", "43201"),
        ("FUNCTION_TIMEOUT_SECONDS", "0"),
        ("FUNCTION_TIMEOUT_SECONDS", "901"),
        ("FUNCTION_HANDLER", "handler"),
        ("LOG_LEVEL", "VERBOSE"),
        ("POWERTOOLS_LAYER_VERSION", "0"),
        ("SQS_BATCH_SIZE", "11"),
        ("SQS_BATCH_SIZE", "0"),
        ("STACK_NAME", ""),
    ],
)
def test_get_config_invalid_value(clean_config_env, name, value):
    """Tests that ConfigurationError is raised for invalid values."""
    clean_config_env.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_config()


def test_get_config_unknown_runtime(clean_config_env):
    clean_config_env.setenv("FUNCTION_RUNTIME", "nodejs18.x")

    with pytest.raises(InvalidRuntimeError) as exc_info:
        get_config()

    assert exc_info.value.context["runtime"] == "nodejs18.x"


def test_get_config_missing_code_bundle(clean_config_env, tmp_path):
    """A code bundle path that does not exist is rejected before synthesis."""
    missing = tmp_path / "does-not-exist"
    clean_config_env.setenv("FUNCTION_CODE_PATH", str(missing))

    with pytest.raises(CodeBundleNotFoundError) as exc_info:
        get_config()

    assert exc_info.value.context == {"path": str(missing)}
    assert isinstance(exc_info.value, ConfigurationError)


def test_get_config_visibility_timeout_shorter_than_function_timeout(clean_config_env):
    clean_config_env.setenv("QUEUE_VISIBILITY_TIMEOUT_SECONDS", "60")
    clean_config_env.setenv("FUNCTION_TIMEOUT_SECONDS", "120")

    with pytest.raises(VisibilityTimeoutError):
        get_config()


def test_get_config_caching(clean_config_env):
    """Tests that get_config returns the same instance when called multiple times."""
    config1 = get_config()
    config2 = get_config()

    assert config1 is config2
