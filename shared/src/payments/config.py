"""Service configuration, read once at process start.

Values come from environment variables. The Stripe API key and webhook
signing secret may instead be stored in SSM Parameter Store when
SSM_PARAMETER_PREFIX is set and the variables are absent.
"""

import logging
import os
from collections.abc import Mapping

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .models.errors import ConfigurationError
from .services.ssm_service import (
    SECRET_KEY_PARAMETER,
    WEBHOOK_SECRET_PARAMETER,
    SSMService,
    SSMServiceError,
)

logger = logging.getLogger(__name__)

_HTTP_URL = TypeAdapter(AnyHttpUrl)

# Settings field -> environment variable
ENV_VARS: dict[str, str] = {
    "stripe_secret": "STRIPE_SECRET",
    "stripe_endpoint_secret": "STRIPE_ENDPOINT_SECRET",
    "stripe_success_url": "STRIPE_SUCCESS_URL",
    "stripe_cancel_url": "STRIPE_CANCEL_URL",
    "redis_url": "REDIS_URL",
    "channel_prefix": "MESSAGE_CHANNEL_PREFIX",
    "service_name": "SERVICE_NAME",
    "port": "PORT",
    "environment": "ENVIRONMENT",
}

SSM_PREFIX_VAR = "SSM_PARAMETER_PREFIX"

# Secrets that may be fetched from SSM, keyed by settings field
_SSM_SECRETS: dict[str, str] = {
    "stripe_secret": SECRET_KEY_PARAMETER,
    "stripe_endpoint_secret": WEBHOOK_SECRET_PARAMETER,
}


class Settings(BaseModel):
    """Static configuration shared by the checkout and webhook paths."""

    model_config = ConfigDict(frozen=True)

    stripe_secret: SecretStr = Field(..., description="Stripe API key")
    stripe_endpoint_secret: SecretStr = Field(..., description="Webhook signing secret")
    stripe_success_url: str = Field(..., description="Redirect after successful payment")
    stripe_cancel_url: str = Field(..., description="Redirect after cancelled payment")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Message channel target")
    channel_prefix: str = Field(default="", description="Prefix prepended to published topics")
    service_name: str = Field(default="payments-service")
    port: int = Field(default=3000, gt=0, lt=65536)
    environment: str = Field(default="dev")

    @field_validator("stripe_secret", "stripe_endpoint_secret")
    @classmethod
    def _non_empty_secret(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("stripe_success_url", "stripe_cancel_url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError("must be an absolute http(s) URL") from None
        return value


def _describe_errors(exc: ValidationError) -> list[str]:
    problems = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else ""
        name = ENV_VARS.get(field, field)
        if error["type"] == "missing":
            problems.append(f"{name} is required")
        else:
            problems.append(f"{name} {error['msg']}")
    return problems


def load_settings(
    environ: Mapping[str, str] | None = None,
    ssm: SSMService | None = None,
) -> Settings:
    """Build Settings from environment variables.

    Args:
        environ: Variables to read from. Defaults to os.environ.
        ssm: SSM service used for missing Stripe secrets. Built on demand
            when SSM_PARAMETER_PREFIX is set.

    Returns:
        Validated settings.

    Raises:
        ConfigurationError: If a required value is missing or invalid.
    """
    env = os.environ if environ is None else environ

    values: dict[str, str] = {}
    for field, var in ENV_VARS.items():
        raw = env.get(var)
        if raw is not None and raw != "":
            values[field] = raw

    missing_secrets = [field for field in _SSM_SECRETS if field not in values]
    prefix = env.get(SSM_PREFIX_VAR)
    if missing_secrets and prefix:
        ssm = ssm or SSMService(prefix=prefix)
        problems = []
        for field in missing_secrets:
            try:
                values[field] = ssm.get_parameter(ssm.path(_SSM_SECRETS[field]))
            except SSMServiceError as e:
                problems.append(f"{ENV_VARS[field]} unavailable: {e}")
        if problems:
            raise ConfigurationError(problems)
        logger.info("Loaded Stripe secrets from SSM prefix %s", prefix)

    try:
        settings = Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(_describe_errors(e)) from e

    logger.info(
        "Configuration loaded for environment %s (service=%s)",
        settings.environment,
        settings.service_name,
    )
    return settings
