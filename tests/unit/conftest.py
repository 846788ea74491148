"""
Shared fixtures for unit tests.
"""

from __future__ import annotations

import json
import os
import types
import uuid

import pytest

CONFIG_ENV_VARS = (
    "STACK_NAME",
    "SERVICE_NAME",
    "QUEUE_VISIBILITY_TIMEOUT_SECONDS",
    "FUNCTION_HANDLER",
    "FUNCTION_RUNTIME",
    "FUNCTION_CODE_PATH",
    "FUNCTION_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "POWERTOOLS_LAYER_VERSION",
    "SQS_BATCH_SIZE",
    "REPORT_BATCH_ITEM_FAILURES",
)


# The handler module builds its Logger at import time, which happens during
# collection, before any fixture runs.
_ORIGINAL_ENV = os.environ.copy()
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "sqs-integration-test")
os.environ.setdefault("POWERTOOLS_LOG_LEVEL", "INFO")


@pytest.fixture(scope="session", autouse=True)
def _env_vars():
    """
    Ensures a deterministic environment for every test run.
    Restores the environment seen before the handler variables were set.
    """
    original = _ORIGINAL_ENV
    yield
    # pytest manages PYTEST_CURRENT_TEST itself and pops it after teardown.
    current_test = os.environ.get("PYTEST_CURRENT_TEST")
    os.environ.clear()
    os.environ.update(original)
    if current_test is not None:
        os.environ["PYTEST_CURRENT_TEST"] = current_test


@pytest.fixture
def clean_config_env(monkeypatch):
    """Removes every stack configuration variable and clears the config cache."""
    from sqs_integration.config import get_config

    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield monkeypatch
    get_config.cache_clear()


# ---------- Minimal, realistic dummy events ---------- #
def _make_sqs_record(body: str, message_id: str | None = None) -> dict:
    return {
        "messageId": message_id or str(uuid.uuid4()),
        "receiptHandle": "ignore",
        "body": body,
        "attributes": {
            "ApproximateReceiveCount": "1",
            "SentTimestamp": "1700000000000",
            "SenderId": "AIDAEXAMPLE",
            "ApproximateFirstReceiveTimestamp": "1700000000001",
        },
        "messageAttributes": {},
        "md5OfBody": "dummy",
        "eventSource": "aws:sqs",
        "eventSourceARN": "arn:aws:sqs:eu-west-1:000000000000:dummy",
        "awsRegion": "eu-west-1",
    }


@pytest.fixture
def sqs_event() -> dict:
    """Two SQS records: one JSON body and one plain-text body."""
    return {
        "Records": [
            _make_sqs_record(json.dumps({"order_id": 42}), message_id="msg-json"),
            _make_sqs_record("hello world", message_id="msg-text"),
        ]
    }


@pytest.fixture
def lambda_context():
    """A *very* small stand-in for the LambdaContext object."""
    return types.SimpleNamespace(
        function_name="sqs-integration-test",
        memory_limit_in_mb=128,
        aws_request_id="req-" + uuid.uuid4().hex,
        invoked_function_arn="arn:aws:lambda:eu-west-1:000000000000:function:dummy",
        get_remaining_time_in_millis=lambda: 30000,
    )


@pytest.fixture
def make_sqs_record():
    """Factory for single SQS records with a given body."""
    return _make_sqs_record
