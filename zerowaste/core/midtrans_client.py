# zerowaste/core/midtrans_client.py
import logging
from functools import lru_cache
from typing import Any

import midtransclient
import requests
from fastapi import HTTPException, status
from midtransclient.error_midtrans import JSONDecodeError, MidtransAPIError

from zerowaste.core.config import get_settings

logger = logging.getLogger(__name__)

# What the SDK raises: API errors, non-JSON replies, transport failures
GATEWAY_ERRORS = (MidtransAPIError, JSONDecodeError, requests.RequestException)


class MidtransGateway:
    """
    Thin wrapper over the Midtrans SDK.

      - Snap: hosted checkout sessions (token + redirect_url)
      - CoreApi: transaction status lookups for webhook verification

    Every SDK failure is surfaced as HTTPException(500) with a message;
    nothing is retried.
    """

    def __init__(self, server_key: str, client_key: str, is_production: bool = False):
        self.snap = midtransclient.Snap(
            is_production=is_production,
            server_key=server_key,
            client_key=client_key,
        )
        self.core = midtransclient.CoreApi(
            is_production=is_production,
            server_key=server_key,
            client_key=client_key,
        )

    def create_checkout(self, parameters: dict[str, Any]) -> dict[str, Any]:
        """
        Create a Snap transaction.

        Returns:
            dict with at least "token" and "redirect_url".
        """
        try:
            return self.snap.create_transaction(parameters)
        except GATEWAY_ERRORS as e:
            logger.error("Midtrans checkout failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create payment transaction",
            )

    def verify_notification(self, notification: dict[str, Any]) -> dict[str, Any]:
        """
        Re-fetch the transaction named in a webhook body from Midtrans.

        The lookup is keyed on the notification's order_id (our transaction
        id). The returned status (not the posted body) is what callers must
        act on.
        """
        try:
            return self.core.transactions.status(str(notification["order_id"]))
        except GATEWAY_ERRORS as e:
            logger.error("Midtrans notification verification failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error handling notification",
            )



@lru_cache
def _gateway(server_key: str, client_key: str, is_production: bool) -> MidtransGateway:
    return MidtransGateway(server_key, client_key, is_production)


def get_payment_gateway() -> MidtransGateway:
    """
    FastAPI dependency returning the configured gateway.

    Raises:
        HTTPException(500): if Midtrans keys are not configured.
    """
    settings = get_settings()
    if not settings.MIDTRANS_SERVER_KEY or not settings.MIDTRANS_CLIENT_KEY:
        logger.error("Midtrans API keys not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment gateway not configured",
        )
    return _gateway(
        settings.MIDTRANS_SERVER_KEY,
        settings.MIDTRANS_CLIENT_KEY,
        settings.MIDTRANS_IS_PRODUCTION,
    )
