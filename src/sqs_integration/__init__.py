"""CDK declaration of an SQS queue wired as the event source of a Lambda function."""

__version__ = "0.1.0"
