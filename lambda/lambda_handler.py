"""
SQS consumer for the integration stack.

Handler path: ``lambda_handler.handler``

Each message in the batch is decoded and logged. Messages that fail are
reported back through ``batchItemFailures`` so that only they become visible
again on the queue; the rest of the batch is deleted by the platform.

When the event source mapping does not report batch item failures
(``REPORT_BATCH_ITEM_FAILURES=false``) the platform ignores that list, so any
failure fails the whole invocation and the entire batch is redelivered.

Powertools and pydantic are provided by the Powertools Lambda layer.
"""

import json
import os
from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.batch import (
    BatchProcessor,
    EventType,
    process_partial_response,
)
from aws_lambda_powertools.utilities.batch.exceptions import BatchProcessingError
from aws_lambda_powertools.utilities.batch.types import PartialItemFailureResponse
from aws_lambda_powertools.utilities.data_classes.sqs_event import SQSRecord
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import BaseModel

logger = Logger()
processor = BatchProcessor(event_type=EventType.SQS)


class EmptyMessageError(ValueError):
    """Raised for a message whose body is blank."""

    def __init__(self, message_id: str):
        super().__init__(f"Message {message_id} has an empty body")
        self.message_id = message_id


class QueueMessage(BaseModel):
    """A decoded queue message. Bodies that are not JSON are kept as text."""

    message_id: str
    payload: Any
    is_json: bool


def decode_message(message_id: str, body: str) -> QueueMessage:
    if not body or not body.strip():
        raise EmptyMessageError(message_id)
    try:
        return QueueMessage(message_id=message_id, payload=json.loads(body), is_json=True)
    except json.JSONDecodeError:
        return QueueMessage(message_id=message_id, payload=body, is_json=False)


def reports_batch_item_failures() -> bool:
    """Whether the event source mapping honours ``batchItemFailures``."""
    return os.getenv("REPORT_BATCH_ITEM_FAILURES", "true").lower() in ("true", "1", "yes", "on")


def record_handler(record: SQSRecord) -> dict[str, Any]:
    message = decode_message(record.message_id, record.body)
    logger.info(
        "Received message",
        extra={
            "message_id": message.message_id,
            "is_json": message.is_json,
            "receive_count": record.raw_event.get("attributes", {}).get(
                "ApproximateReceiveCount"
            ),
        },
    )
    logger.debug("Message payload", extra={"payload": message.payload})
    return message.model_dump()


@logger.inject_lambda_context()
def handler(event: dict, context: LambdaContext) -> PartialItemFailureResponse:
    """Main Lambda handler for SQS batches."""
    records = event.get("Records", [])
    if not records:
        logger.warning("Event did not contain any SQS records. Exiting gracefully.")
        return {"batchItemFailures": []}

    logger.info("Starting SQS batch processing", extra={"sqs_messages": len(records)})
    response = process_partial_response(
        event=event,
        record_handler=record_handler,
        processor=processor,
        context=context,
    )

    failures = response.get("batchItemFailures", [])
    if failures:
        failed_ids = [f["itemIdentifier"] for f in failures]
        if not reports_batch_item_failures():
            logger.error(
                "Some messages failed, failing the whole batch for redelivery",
                extra={"failed_message_ids": failed_ids},
            )
            raise BatchProcessingError(
                msg=f"{len(failed_ids)} of {len(records)} messages failed",
                child_exceptions=processor.exceptions,
            )
        logger.warning(
            "Some messages failed and will be retried",
            extra={"failed_message_ids": failed_ids},
        )
    return response
