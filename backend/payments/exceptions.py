from rest_framework import status
from rest_framework.exceptions import APIException


class GatewayError(APIException):
    """The payment provider was unreachable or rejected the request."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment gateway is unavailable. Please try again."
    default_code = "gateway_error"
