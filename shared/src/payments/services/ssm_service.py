"""SSM Parameter Store lookup for Stripe secrets.

Used at startup when the Stripe API key or webhook signing secret are not
present in the environment but an SSM parameter prefix is configured.
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

SECRET_KEY_PARAMETER = "stripe/secret_key"
WEBHOOK_SECRET_PARAMETER = "stripe/webhook_secret"


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""


class SSMService:
    """Retrieves SecureString parameters from AWS SSM Parameter Store.

    Values are decrypted and cached per instance, so one instance built at
    startup fetches each parameter at most once.

    Usage:
        ssm = SSMService(prefix="/payments/dev")
        stripe_key = ssm.get_parameter(ssm.path(SECRET_KEY_PARAMETER))
    """

    def __init__(self, prefix: str = "", client=None) -> None:
        """Initialize the SSM client.

        Args:
            prefix: Parameter path prefix (e.g., "/payments/dev").
            client: Optional pre-built boto3 SSM client.
        """
        self._prefix = prefix.rstrip("/")
        self._client = client or boto3.client("ssm")
        self._cache: dict[str, str] = {}

    def path(self, name: str) -> str:
        """Build the full parameter path for a name relative to the prefix."""
        return f"{self._prefix}/{name.lstrip('/')}"

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a parameter value from SSM Parameter Store.

        Args:
            name: Full parameter path (e.g., "/payments/dev/stripe/secret_key")
            use_cache: Whether to use cached value if available (default: True)

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If parameter cannot be retrieved.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
            value = response["Parameter"]["Value"]
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(
                f"Failed to retrieve SSM parameter {name}: {e}"
            ) from e
        except BotoCoreError as e:
            raise SSMServiceError(f"Failed to retrieve SSM parameter {name}: {e}") from e

        self._cache[name] = value
        return value

    def clear_cache(self) -> None:
        """Clear all cached parameters."""
        self._cache.clear()
        logger.info("SSM parameter cache cleared")
