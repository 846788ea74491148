#!/usr/bin/env python3
"""
CDK application entry point.

Invoked by the CDK toolkit through ``cdk.json``:

    cdk synth
    cdk deploy

Configuration is read from the environment (see ``config.py``). Any error
raised while declaring the stack is logged and re-raised so the toolkit
reports a failed synthesis.
"""

import logging

from .config import get_config
from .exceptions import SqsIntegrationError, get_error_context
from .stack import build_app

logger = logging.getLogger(__name__)


def main() -> None:
    try:
        config = get_config()
    except SqsIntegrationError as e:
        logging.basicConfig(level=logging.INFO)
        error_details = get_error_context(e)
        logger.error(
            f"Invalid stack configuration: {e}",
            extra={
                "error_code": error_details["error_code"],
                "error_context": error_details["context"],
            },
        )
        raise

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app, _ = build_app(config)
    app.synth()


if __name__ == "__main__":
    main()
