import argparse
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Config:
    """Configuration for the smoke test runner."""

    stack_name: str = "SqsIntegrationStack"
    description: str = "Smoke Test Run"
    aws_region: Optional[str] = None
    num_messages: int = 20
    timeout_seconds: int = 300
    poll_interval_seconds: int = 5
    drain_confirmations: int = 3
    verbose: bool = False
    raw_config: Dict[str, Any] = field(default_factory=dict, repr=False)


def load_configuration(args: argparse.Namespace) -> Config:
    """Loads configuration from file and overrides with CLI arguments."""
    config_data = {}
    if args.config:
        try:
            with open(args.config) as f:
                config_data = json.load(f)
        except FileNotFoundError as e:
            raise FileNotFoundError(
                f"Error: Configuration file '{args.config}' not found."
            ) from e

    cli_args = {
        key: value
        for key, value in vars(args).items()
        if value is not None and key != "config"
    }
    config_data.update(cli_args)
    raw_config = config_data.copy()

    if int(config_data.get("num_messages", 1)) <= 0:
        raise ValueError("'num_messages' must be a positive integer.")
    if int(config_data.get("drain_confirmations", 1)) <= 0:
        raise ValueError("'drain_confirmations' must be a positive integer.")

    return Config(raw_config=raw_config, **config_data)
