import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .exceptions import (
    CodeBundleNotFoundError,
    ConfigurationError,
    InvalidRuntimeError,
    VisibilityTimeoutError,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CODE_PATH = PROJECT_ROOT / "lambda"

# Runtime tags the function can be deployed with. Each needs a matching
# Powertools layer build.
SUPPORTED_RUNTIMES = ("python3.11", "python3.12", "python3.13")

# SQS limit for standard queues without a batching window.
MAX_SQS_BATCH_SIZE = 10


@dataclass(frozen=True, slots=True)
class StackConfig:
    """Deployment configuration loaded from environment variables."""

    stack_name: str
    service_name: str

    # --- Queue ---
    visibility_timeout_seconds: int

    # --- Function ---
    handler: str
    runtime: str
    code_path: str
    function_timeout_seconds: int
    log_level: str
    powertools_layer_version: int

    # --- Event source binding ---
    batch_size: int
    report_batch_item_failures: bool

    @property
    def runtime_layer_tag(self) -> str:
        """Runtime tag as used in Powertools layer names, e.g. ``python312``."""
        return self.runtime.replace(".", "")

    @classmethod
    def load_from_env(cls) -> "StackConfig":
        """
        Loads configuration from environment variables, performing validation and type casting.
        Fails fast with a ConfigurationError if anything is invalid.
        """
        try:
            stack_name = os.getenv("STACK_NAME", "SqsIntegrationStack")
            if not stack_name:
                raise ValueError("STACK_NAME must not be empty.")
            service_name = os.getenv("SERVICE_NAME", "sqs-integration")

            visibility_timeout_seconds = int(
                os.getenv("QUEUE_VISIBILITY_TIMEOUT_SECONDS", "300")
            )
            # SQS accepts 0 to 12 hours.
            if not 0 <= visibility_timeout_seconds <= 43_200:
                raise ValueError(
                    "QUEUE_VISIBILITY_TIMEOUT_SECONDS must be between 0 and 43200."
                )

            handler = os.getenv("FUNCTION_HANDLER", "lambda_handler.handler")
            if "." not in handler:
                raise ValueError(
                    "FUNCTION_HANDLER must be of the form '<module>.<function>'."
                )

            runtime = os.getenv("FUNCTION_RUNTIME", "python3.12")
            code_path = os.getenv("FUNCTION_CODE_PATH", str(DEFAULT_CODE_PATH))

            function_timeout_seconds = int(os.getenv("FUNCTION_TIMEOUT_SECONDS", "30"))
            if not 1 <= function_timeout_seconds <= 900:
                raise ValueError("FUNCTION_TIMEOUT_SECONDS must be between 1 and 900.")

            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            allowed_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            if log_level not in allowed_log_levels:
                raise ValueError(
                    f"LOG_LEVEL must be one of {allowed_log_levels}, not '{log_level}'"
                )

            powertools_layer_version = int(os.getenv("POWERTOOLS_LAYER_VERSION", "7"))
            if powertools_layer_version <= 0:
                raise ValueError("POWERTOOLS_LAYER_VERSION must be a positive integer.")

            batch_size = int(os.getenv("SQS_BATCH_SIZE", "10"))
            if not 1 <= batch_size <= MAX_SQS_BATCH_SIZE:
                raise ValueError(
                    f"SQS_BATCH_SIZE must be between 1 and {MAX_SQS_BATCH_SIZE}."
                )

            report_batch_item_failures = os.getenv(
                "REPORT_BATCH_ITEM_FAILURES", "true"
            ).lower() in ("true", "1", "yes", "on")

        except (ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Invalid value for an environment variable: {e}"
            ) from e

        if runtime not in SUPPORTED_RUNTIMES:
            raise InvalidRuntimeError(runtime, list(SUPPORTED_RUNTIMES))

        if not Path(code_path).is_dir():
            raise CodeBundleNotFoundError(code_path)

        # The event source mapping is rejected by CloudFormation otherwise.
        if visibility_timeout_seconds < function_timeout_seconds:
            raise VisibilityTimeoutError(
                visibility_timeout_seconds, function_timeout_seconds
            )

        return cls(
            stack_name=stack_name,
            service_name=service_name,
            visibility_timeout_seconds=visibility_timeout_seconds,
            handler=handler,
            runtime=runtime,
            code_path=code_path,
            function_timeout_seconds=function_timeout_seconds,
            log_level=log_level,
            powertools_layer_version=powertools_layer_version,
            batch_size=batch_size,
            report_batch_item_failures=report_batch_item_failures,
        )


# --- Singleton Factory Function (Lazy-loaded and Cached) ---
@lru_cache(maxsize=1)
def get_config() -> StackConfig:
    """
    Loads the deployment configuration from environment variables.
    The result is cached, so the environment is only read once per process.
    """
    logger.info("Loading stack configuration from environment...")
    return StackConfig.load_from_env()
