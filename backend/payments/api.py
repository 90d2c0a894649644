import logging

import stripe
from django.conf import settings
from django.db import InterfaceError, OperationalError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from payments.services.webhooks import handle_stripe_event

logger = logging.getLogger(__name__)


class StripeWebhookView(APIView):
    """
    Receive Stripe checkout/payment events.

    Every event that was handled, including deliberate no-ops, is acknowledged
    with 200 so Stripe stops retrying it. Only transient store failures answer
    with 503 to ask for a redelivery.
    """

    permission_classes: list = []
    authentication_classes: list = []

    def _read_event(self, request):
        if not settings.STRIPE_WEBHOOK_SECRET:
            # Signature verification happens upstream of the application.
            return request.data

        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")
        stripe.Webhook.construct_event(
            request.body, sig_header, settings.STRIPE_WEBHOOK_SECRET
        )
        # Verified; hand the reconciler the plain JSON body.
        return request.data

    def post(self, request, *args, **kwargs):
        try:
            event = self._read_event(request)
        except ValueError:
            logger.warning("Invalid payload received on Stripe webhook.")
            return Response(status=status.HTTP_400_BAD_REQUEST)
        except stripe.SignatureVerificationError:
            logger.warning("Invalid Stripe signature.")
            return Response(status=status.HTTP_400_BAD_REQUEST)

        if not hasattr(event, "get") or not event.get("type"):
            logger.warning("Stripe webhook payload is not an event envelope.")
            return Response({"detail": "Invalid event payload."}, status=status.HTTP_400_BAD_REQUEST)

        try:
            outcome = handle_stripe_event(event)
        except (OperationalError, InterfaceError):
            logger.exception("Store unavailable while handling Stripe event %s", event.get("id"))
            return Response(
                {"detail": "Temporarily unable to process event."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response({"message": outcome.message}, status=status.HTTP_200_OK)
