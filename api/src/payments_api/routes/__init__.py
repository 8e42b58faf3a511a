"""API routes package.

Routers are registered in main.py with the /api prefix:

- payments: checkout session creation and redirect landings
- webhooks: Stripe webhook ingestion
"""

from payments_api.routes.payments import router as payments_router
from payments_api.routes.webhooks import router as webhooks_router

__all__ = [
    "payments_router",
    "webhooks_router",
]
