import boto3
from botocore.exceptions import NoCredentialsError, NoRegionError, ClientError
from rich.console import Console
from rich.panel import Panel

from .config import Config

QUEUE_URL_OUTPUT = "QueueUrl"
FUNCTION_NAME_OUTPUT = "FunctionName"


def get_stack_outputs(cloudformation_client, stack_name: str) -> dict[str, str]:
    """Returns the outputs of a deployed stack as a ``{key: value}`` mapping."""
    response = cloudformation_client.describe_stacks(StackName=stack_name)
    stacks = response.get("Stacks", [])
    if not stacks:
        raise ValueError(f"Stack '{stack_name}' was not found.")
    return {
        output["OutputKey"]: output["OutputValue"]
        for output in stacks[0].get("Outputs", [])
    }


def verify_aws_connectivity(config: Config) -> tuple[boto3.Session, str]:
    """
    Performs pre-flight checks before the test runner is instantiated.
    - Verifies credentials and region are configured.
    - Resolves the queue URL from the stack outputs.
    - Verifies access to the queue.
    - Exits gracefully with a clear error message on failure.
    """
    console = Console()
    console.print("\n--- [bold blue]Pre-flight Checks[/bold blue] ---")

    try:
        session = boto3.Session(region_name=config.aws_region)
        cloudformation = session.client("cloudformation")
        sqs_client = session.client("sqs")
        console.log(
            f"[green]✓[/green] Boto3 clients initialized using region '{session.region_name}'."
        )

        outputs = get_stack_outputs(cloudformation, config.stack_name)
        queue_url = outputs.get(QUEUE_URL_OUTPUT)
        if not queue_url:
            raise ValueError(
                f"Stack '{config.stack_name}' has no '{QUEUE_URL_OUTPUT}' output."
            )
        console.log(f"[green]✓[/green] Resolved queue URL: '{queue_url}'")
        function_name = outputs.get(FUNCTION_NAME_OUTPUT)
        if not function_name:
            raise ValueError(
                f"Stack '{config.stack_name}' has no '{FUNCTION_NAME_OUTPUT}' output."
            )
        console.log(f"[green]✓[/green] Resolved consumer function: '{function_name}'")

        sqs_client.get_queue_attributes(
            QueueUrl=queue_url, AttributeNames=["VisibilityTimeout"]
        )
        console.log("[green]✓[/green] Access confirmed for SQS queue.")

        console.print("[bold green]✅ Pre-flight checks passed.[/bold green]")
        return session, queue_url

    except NoCredentialsError:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        error_message = (
            "AWS credentials not found. Please configure them using one of the following methods:\n"
            "  1. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)\n"
            "  2. A shared credentials file (~/.aws/credentials) with a profile.\n"
            "  3. An IAM role attached to the EC2 instance or ECS task."
        )
        console.print(
            Panel(error_message, title="Authentication Error", border_style="red")
        )
        exit(2)

    except NoRegionError:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        error_message = (
            "An AWS region was not specified. Please configure it using one of the following methods:\n"
            "  1. The --aws-region command-line flag.\n"
            "  2. The 'aws_region' key in your JSON config file.\n"
            "  3. The AWS_REGION or AWS_DEFAULT_REGION environment variables."
        )
        console.print(
            Panel(error_message, title="Configuration Error", border_style="red")
        )
        exit(2)

    except ClientError as e:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        error_code = e.response["Error"]["Code"]
        if error_code == "ValidationError":
            error_message = f"Stack '{config.stack_name}' does not exist. Has it been deployed?"
        elif error_code in ("AccessDenied", "AccessDeniedException"):
            error_message = "Access Denied when trying to access an AWS resource. Please check your IAM permissions."
        elif error_code == "AWS.SimpleQueueService.NonExistentQueue":
            error_message = "The queue named in the stack outputs no longer exists."
        else:
            error_message = f"An unexpected AWS API error occurred: {e}"

        console.print(Panel(error_message, title="AWS API Error", border_style="red"))
        exit(2)

    except ValueError as e:
        console.print("\n[bold red]❌ PRE-FLIGHT CHECK FAILED[/bold red]\n")
        console.print(Panel(str(e), title="Configuration Error", border_style="red"))
        exit(2)
