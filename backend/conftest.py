from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import Guide, Tourist, User
from bookings.models import Booking
from listings.models import Listing
from payments.models import Payment


def _create_user(email: str, role: str, **extra) -> User:
    return User.objects.create_user(
        username=email,
        email=email,
        password="password123",
        role=role,
        **extra,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_tourist(db):
    def factory(email="tourist@example.com", name="Tina Tourist"):
        user = _create_user(email, User.TOURIST)
        return Tourist.objects.create(user=user, name=name, email=email)

    return factory


@pytest.fixture
def make_guide(db):
    def factory(email="guide@example.com", name="Gabe Guide", fee_cents=50000):
        user = _create_user(email, User.GUIDE)
        return Guide.objects.create(user=user, name=name, email=email, fee_cents=fee_cents)

    return factory


@pytest.fixture
def tourist(make_tourist):
    return make_tourist()


@pytest.fixture
def guide(make_guide):
    return make_guide()


@pytest.fixture
def listing(guide):
    return Listing.objects.create(
        guide=guide,
        title="Old Town Walk",
        location="Dhaka",
        price_cents=50000,
    )


@pytest.fixture
def admin_user(db):
    return _create_user("admin@example.com", User.ADMIN)


@pytest.fixture
def booking_date():
    return (timezone.now() + timedelta(days=14)).replace(microsecond=0)


@pytest.fixture
def tourist_client(tourist):
    client = APIClient()
    client.force_authenticate(tourist.user)
    return client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(admin_user)
    return client


@pytest.fixture
def make_booking(db, booking_date):
    def factory(*, tourist, guide, listing=None, payment_status=Booking.PAYMENT_PENDING):
        booking = Booking.objects.create(
            tourist=tourist,
            guide=guide,
            listing=listing,
            booking_date=booking_date,
            payment_status=payment_status,
        )
        Payment.objects.create(
            booking=booking,
            amount_cents=listing.price_cents if listing else guide.fee_cents,
            transaction_id=uuid4().hex,
            stripe_checkout_session=f"cs_test_{uuid4().hex}",
            status=payment_status,
        )
        return booking

    return factory
