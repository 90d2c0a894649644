import pytest
import stripe
from django.db import OperationalError

from bookings.models import Booking
from payments.models import Payment

WEBHOOK_URL = "/api/payment/webhook/"


@pytest.fixture
def booking(tourist, guide, make_booking):
    return make_booking(tourist=tourist, guide=guide)


def _event(booking, event_id="evt_api_1", payment_status="paid"):
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": "cs_test_api",
                "payment_status": payment_status,
                "metadata": {"bookingId": str(booking.id), "paymentId": str(booking.payment.id)},
            }
        },
    }


@pytest.mark.django_db
def test_webhook_applies_event_without_authentication(api_client, booking):
    response = api_client.post(WEBHOOK_URL, _event(booking), format="json")

    assert response.status_code == 200
    assert response.json() == {"message": "Webhook processed successfully"}
    booking.refresh_from_db()
    assert booking.payment_status == Booking.PAYMENT_PAID


@pytest.mark.django_db
def test_duplicate_webhook_is_acknowledged(api_client, booking):
    api_client.post(WEBHOOK_URL, _event(booking), format="json")

    response = api_client.post(WEBHOOK_URL, _event(booking), format="json")

    assert response.status_code == 200
    assert response.json() == {"message": "Event already processed"}


@pytest.mark.django_db
@pytest.mark.parametrize(
    "mutate",
    [
        lambda event: event["data"]["object"].update(metadata={}),
        lambda event: event["data"]["object"].update(metadata="oops"),
        lambda event: event.update(data="oops"),
        lambda event: event["data"].update(object="oops"),
    ],
    ids=["empty-metadata", "string-metadata", "string-data", "string-object"],
)
def test_business_noops_still_return_200(api_client, booking, mutate):
    event = _event(booking)
    mutate(event)

    response = api_client.post(WEBHOOK_URL, event, format="json")

    assert response.status_code == 200
    assert response.json() == {"message": "Missing metadata"}
    booking.refresh_from_db()
    assert booking.payment_status == Booking.PAYMENT_PENDING


@pytest.mark.django_db
def test_payload_without_event_type_is_rejected(api_client):
    response = api_client.post(WEBHOOK_URL, {"id": "evt_1"}, format="json")

    assert response.status_code == 400


@pytest.mark.django_db
def test_signed_payload_is_verified(monkeypatch, settings, api_client, booking):
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"
    calls = []

    def fake_construct_event(payload, sig_header, secret):
        calls.append((sig_header, secret))
        return _event(booking)

    monkeypatch.setattr("payments.api.stripe.Webhook.construct_event", fake_construct_event)

    response = api_client.post(
        WEBHOOK_URL,
        _event(booking),
        format="json",
        HTTP_STRIPE_SIGNATURE="t=1,v1=abc",
    )

    assert response.status_code == 200
    assert calls == [("t=1,v1=abc", "whsec_test")]
    assert Payment.objects.get(booking=booking).status == Payment.PAID


@pytest.mark.django_db
def test_bad_signature_is_rejected(monkeypatch, settings, api_client, booking):
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"

    def fake_construct_event(payload, sig_header, secret):
        raise stripe.SignatureVerificationError("No signatures found", sig_header)

    monkeypatch.setattr("payments.api.stripe.Webhook.construct_event", fake_construct_event)

    response = api_client.post(WEBHOOK_URL, _event(booking), format="json", HTTP_STRIPE_SIGNATURE="bad")

    assert response.status_code == 400
    booking.refresh_from_db()
    assert booking.payment_status == Booking.PAYMENT_PENDING


@pytest.mark.django_db
def test_store_outage_asks_stripe_to_retry(monkeypatch, api_client, booking):
    def unavailable(event):
        raise OperationalError("connection refused")

    monkeypatch.setattr("payments.api.handle_stripe_event", unavailable)

    response = api_client.post(WEBHOOK_URL, _event(booking), format="json")

    assert response.status_code == 503
