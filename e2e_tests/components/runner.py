# e2e_tests/components/runner.py
import json
import time
import uuid
from datetime import datetime, timezone
from typing import List, TypedDict

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .config import Config


class SendResult(TypedDict):
    sent: int
    failed: List[str]


# --- Constants ---
SQS_SEND_BATCH_LIMIT = 10
DRAIN_ATTRIBUTES = [
    "ApproximateNumberOfMessages",
    "ApproximateNumberOfMessagesNotVisible",
]


class SmokeTestRunner:
    """Sends test messages to the deployed queue and waits for the function to drain it."""

    def __init__(self, config: Config, sqs_client, queue_url: str):
        self.config = config
        self.sqs = sqs_client
        self.queue_url = queue_url
        self.console = Console()
        self.run_id = f"smoke-test-{uuid.uuid4().hex[:8]}"

    def _build_message(self, index: int) -> dict:
        body = {
            "run_id": self.run_id,
            "sequence": index,
            "sent_at": datetime.now(timezone.utc).isoformat(),
        }
        return {"Id": str(index), "MessageBody": json.dumps(body)}

    def send_messages(self) -> SendResult:
        """Sends ``num_messages`` JSON messages in batches of ten."""
        messages = [self._build_message(i) for i in range(self.config.num_messages)]
        result: SendResult = {"sent": 0, "failed": []}

        for start in range(0, len(messages), SQS_SEND_BATCH_LIMIT):
            batch = messages[start : start + SQS_SEND_BATCH_LIMIT]
            response = self.sqs.send_message_batch(
                QueueUrl=self.queue_url, Entries=batch
            )
            result["sent"] += len(response.get("Successful", []))
            result["failed"].extend(
                entry["Id"] for entry in response.get("Failed", [])
            )

        return result

    def queue_depth(self) -> int:
        """Visible plus in-flight messages, as approximated by SQS."""
        attributes = self.sqs.get_queue_attributes(
            QueueUrl=self.queue_url, AttributeNames=DRAIN_ATTRIBUTES
        )["Attributes"]
        return sum(int(attributes.get(name, "0")) for name in DRAIN_ATTRIBUTES)

    def wait_for_drain(self) -> bool:
        """
        Polls the queue until it is empty or the timeout expires.

        The depth counters are approximate and can read 0 right after a send,
        so the queue only counts as drained after `drain_confirmations`
        consecutive empty readings.
        """
        deadline = time.monotonic() + self.config.timeout_seconds
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task = progress.add_task(
                "Waiting for the queue to drain...", total=self.config.num_messages
            )
            empty_readings = 0
            while True:
                depth = self.queue_depth()
                progress.update(
                    task, completed=max(self.config.num_messages - depth, 0)
                )
                empty_readings = empty_readings + 1 if depth == 0 else 0
                if empty_readings >= self.config.drain_confirmations:
                    return True
                if time.monotonic() >= deadline:
                    return False
                time.sleep(self.config.poll_interval_seconds)

    def _print_summary(self, send_result: SendResult, drained: bool, elapsed: float):
        table = Table(title=f"Smoke Test Summary ({self.run_id})")
        table.add_column("Check")
        table.add_column("Result")
        table.add_row("Messages sent", str(send_result["sent"]))
        table.add_row("Messages rejected", str(len(send_result["failed"])))
        table.add_row(
            "Queue drained",
            "[green]yes[/green]" if drained else "[red]no[/red]",
        )
        table.add_row("Elapsed", f"{elapsed:.1f}s")
        self.console.print(table)

    def run(self) -> int:
        """Runs the smoke test. Returns 0 on success, 1 on failure."""
        self.console.print(
            Panel(
                f"{self.config.description}\nQueue: {self.queue_url}",
                title="SQS Integration Smoke Test",
                border_style="blue",
            )
        )
        start = time.monotonic()

        send_result = self.send_messages()
        if send_result["failed"]:
            self.console.print(
                f"[yellow]⚠ {len(send_result['failed'])} messages were rejected by SQS.[/yellow]"
            )

        drained = self.wait_for_drain()
        self._print_summary(send_result, drained, time.monotonic() - start)

        if drained and not send_result["failed"]:
            self.console.print("[bold green]✅ Smoke test passed.[/bold green]")
            return 0
        self.console.print("[bold red]❌ Smoke test failed.[/bold red]")
        return 1
