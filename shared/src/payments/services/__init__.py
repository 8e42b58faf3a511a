"""Backend services for the payments service."""

from .message_channel import MessageChannel
from .ssm_service import SSMService, SSMServiceError
from .stripe_service import StripeService, StripeServiceError
from .webhook_handler import WebhookHandler
