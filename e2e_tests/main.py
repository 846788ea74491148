#!/usr/bin/env python

# e2e_tests/main.py

import argparse

from components.config import load_configuration
from components.pre_flight import verify_aws_connectivity
from components.runner import SmokeTestRunner


def main():
    """Main entry point for the smoke test runner script."""
    parser = argparse.ArgumentParser(
        description="Smoke test for a deployed SQS -> Lambda integration stack.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("-c", "--config", help="Path to a JSON configuration file.")
    parser.add_argument("--stack-name", help="Name of the deployed CloudFormation stack.")
    parser.add_argument("--aws-region", help="AWS region the stack is deployed in.")
    parser.add_argument(
        "-n", "--num-messages", type=int, help="Number of test messages to send."
    )
    parser.add_argument(
        "--timeout-seconds", type=int, help="How long to wait for the queue to drain."
    )
    parser.add_argument(
        "--drain-confirmations",
        type=int,
        help="Consecutive empty readings required before the queue counts as drained.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose output, including full exception tracebacks.",
    )

    args = parser.parse_args()

    # 1. Load the configuration object first.
    config = load_configuration(args)

    # 2. Run the pre-flight check. This function will exit the script on failure.
    session, queue_url = verify_aws_connectivity(config)

    # 3. If the check passes, we can safely create and run the runner.
    try:
        runner = SmokeTestRunner(config, session.client("sqs"), queue_url)
        exit(runner.run())
    except Exception as e:
        print(f"\nAn unexpected error occurred during the test run: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        exit(1)


if __name__ == "__main__":
    main()
