"""SQS queue wired as the event source of a Lambda function."""

from __future__ import annotations

import logging
from typing import Optional

from aws_cdk import (
    App,
    Aws,
    CfnOutput,
    Duration,
    Stack,
    aws_lambda as _lambda,
    aws_lambda_event_sources as lambda_events,
    aws_sqs as sqs,
)
from constructs import Construct

from .config import StackConfig, get_config

logger = logging.getLogger(__name__)

RUNTIMES = {
    "python3.11": _lambda.Runtime.PYTHON_3_11,
    "python3.12": _lambda.Runtime.PYTHON_3_12,
    "python3.13": _lambda.Runtime.PYTHON_3_13,
}

# Account that publishes the public Powertools for AWS Lambda (Python) layers.
POWERTOOLS_LAYER_ACCOUNT = "017000801446"


class SqsIntegrationStack(Stack):
    """One queue, one function, and the event source mapping between them."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        config: Optional[StackConfig] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.config = config or get_config()

        self.queue = self._create_queue()
        self.function = self._create_function()

        self.event_source = lambda_events.SqsEventSource(
            self.queue,
            batch_size=self.config.batch_size,
            report_batch_item_failures=self.config.report_batch_item_failures,
        )
        self.function.add_event_source(self.event_source)

        self._create_outputs()

        logger.info(
            "Declared stack",
            extra={
                "stack_name": construct_id,
                "visibility_timeout_seconds": self.config.visibility_timeout_seconds,
                "handler": self.config.handler,
                "runtime": self.config.runtime,
            },
        )

    def _create_queue(self) -> sqs.Queue:
        return sqs.Queue(
            self,
            "SqsIntegrationQueue",
            visibility_timeout=Duration.seconds(self.config.visibility_timeout_seconds),
        )

    def _create_function(self) -> _lambda.Function:
        """Create the consumer function from the local code bundle."""
        powertools_layer = _lambda.LayerVersion.from_layer_version_arn(
            self,
            "PowertoolsLayer",
            (
                f"arn:aws:lambda:{Aws.REGION}:{POWERTOOLS_LAYER_ACCOUNT}:layer:"
                f"AWSLambdaPowertoolsPythonV3-{self.config.runtime_layer_tag}-x86_64:"
                f"{self.config.powertools_layer_version}"
            ),
        )

        # Code.from_asset raises here if the bundle path does not exist.
        return _lambda.Function(
            self,
            "SQSLambda",
            runtime=RUNTIMES[self.config.runtime],
            handler=self.config.handler,
            code=_lambda.Code.from_asset(self.config.code_path),
            timeout=Duration.seconds(self.config.function_timeout_seconds),
            layers=[powertools_layer],
            environment={
                "POWERTOOLS_SERVICE_NAME": self.config.service_name,
                "POWERTOOLS_LOG_LEVEL": self.config.log_level,
                # Tells the handler whether the mapping reads batchItemFailures.
                "REPORT_BATCH_ITEM_FAILURES": str(
                    self.config.report_batch_item_failures
                ).lower(),
            },
        )

    def _create_outputs(self) -> None:
        CfnOutput(self, "QueueUrl", value=self.queue.queue_url)
        CfnOutput(self, "QueueArn", value=self.queue.queue_arn)
        CfnOutput(self, "FunctionName", value=self.function.function_name)


def build_app(
    config: Optional[StackConfig] = None, app: Optional[App] = None
) -> tuple[App, SqsIntegrationStack]:
    """Create the CDK app (or reuse ``app``) holding a single integration stack."""
    config = config or get_config()
    app = app or App()
    stack = SqsIntegrationStack(app, config.stack_name, config=config)
    return app, stack
