# ABOUTME: Minimal AWS Lambda client for synchronous invocations
# ABOUTME: Wraps boto3 invoke calls and decodes payloads and tail logs

"""Lambda client for synchronous, single-attempt invocations."""

import base64
import json
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bref_cli.config import DEFAULT_PROFILE, MAX_INVOCATION_SECONDS

from .exceptions import InvocationFailed

logger = logging.getLogger(__name__)


class InvocationResult:
    """Result of a Lambda invocation."""

    def __init__(self, response: dict[str, Any]):
        self.status_code = response.get("StatusCode")
        self.function_error = response.get("FunctionError")
        self.raw_payload = self._read_payload(response.get("Payload"))
        self.logs = self._decode_logs(response.get("LogResult"))

    @staticmethod
    def _read_payload(payload) -> str:
        if payload is None:
            return ""
        body = payload.read() if hasattr(payload, "read") else payload
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        return body

    @staticmethod
    def _decode_logs(log_result: str | None) -> str:
        if not log_result:
            return ""
        return base64.b64decode(log_result).decode("utf-8", errors="replace")

    @property
    def payload(self) -> Any:
        """The JSON-decoded response body, or the raw text when it is not JSON."""
        if not self.raw_payload:
            return None
        try:
            return json.loads(self.raw_payload)
        except ValueError:
            return self.raw_payload


class SimpleLambdaClient:
    """
    Invokes Lambda functions synchronously with a single attempt.

    The read timeout is raised to the maximum Lambda execution time so that
    long-running commands are not cut short by the HTTP client.
    """

    def __init__(self, region: str, profile: str = None, timeout: int = MAX_INVOCATION_SECONDS):
        """
        Initialize the Lambda client.

        Args:
            region: AWS region
            profile: Optional AWS profile name
            timeout: Upper bound on the invocation duration, in seconds
        """
        self.region = region
        self.profile = profile
        self.timeout = timeout
        self._client = None

    @property
    def client(self):
        """Lazy-loaded Lambda client without automatic retries."""
        if not self._client:
            if self.profile and self.profile != DEFAULT_PROFILE:
                session = boto3.Session(region_name=self.region, profile_name=self.profile)
            else:
                session = boto3.Session(region_name=self.region)
            config = Config(
                read_timeout=self.timeout,
                connect_timeout=60,
                retries={"max_attempts": 0},
            )
            self._client = session.client("lambda", config=config)
        return self._client

    def invoke(self, function_name: str, event: str) -> InvocationResult:
        """
        Invoke a function and wait for its result.

        Args:
            function_name: Function name or ARN
            event: JSON-encoded request body

        Returns:
            InvocationResult with the decoded payload and tail logs

        Raises:
            InvocationFailed: if the call fails or the function reports an error
        """
        logger.debug("Invoking %s in %s (profile %s)", function_name, self.region, self.profile)
        try:
            response = self.client.invoke(
                FunctionName=function_name,
                InvocationType="RequestResponse",
                LogType="Tail",
                Payload=event.encode("utf-8"),
            )
        except ClientError as e:
            message = e.response.get("Error", {}).get("Message") or str(e)
            raise InvocationFailed(message, function_name=function_name) from e
        except BotoCoreError as e:
            raise InvocationFailed(str(e), function_name=function_name) from e

        result = InvocationResult(response)
        logger.debug("Invocation of %s returned status %s", function_name, result.status_code)

        if result.function_error:
            payload = result.payload
            if isinstance(payload, dict) and payload.get("errorMessage"):
                message = payload["errorMessage"]
            else:
                message = result.raw_payload or result.function_error
            raise InvocationFailed(message, logs=result.logs, function_name=function_name)

        return result
