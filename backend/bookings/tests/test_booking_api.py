import pytest
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from bookings.models import Booking
from bookings.services.bookings import update_booking_status
from payments.models import Payment
from payments.services.webhooks import handle_stripe_event


def _ids(response):
    return {item["id"] for item in response.json()["results"]}


@pytest.fixture
def second_tourist(make_tourist):
    return make_tourist(email="second@example.com", name="Sam Second")


@pytest.fixture
def guide_client(guide):
    client = APIClient()
    client.force_authenticate(guide.user)
    return client


@pytest.mark.django_db
def test_tourist_lists_only_own_bookings(tourist_client, tourist, second_tourist, guide, make_booking):
    own = [make_booking(tourist=tourist, guide=guide) for _ in range(2)]
    make_booking(tourist=second_tourist, guide=guide)

    response = tourist_client.get("/api/booking/")

    assert response.status_code == 200
    assert response.json()["count"] == 2
    assert _ids(response) == {str(booking.id) for booking in own}


@pytest.mark.django_db
def test_guide_lists_bookings_for_self_and_own_listings(
    guide_client, tourist, guide, listing, make_guide, make_booking
):
    other_guide = make_guide(email="other@example.com", name="Olga Other")
    direct = make_booking(tourist=tourist, guide=guide)
    via_listing = make_booking(tourist=tourist, guide=guide, listing=listing)
    make_booking(tourist=tourist, guide=other_guide)

    response = guide_client.get("/api/booking/")

    assert response.status_code == 200
    assert _ids(response) == {str(direct.id), str(via_listing.id)}


@pytest.mark.django_db
def test_admin_lists_everything_but_soft_deleted(admin_client, tourist, second_tourist, guide, make_booking):
    kept = [make_booking(tourist=tourist, guide=guide), make_booking(tourist=second_tourist, guide=guide)]
    hidden = make_booking(tourist=tourist, guide=guide)
    hidden.soft_delete()

    response = admin_client.get("/api/booking/")

    assert _ids(response) == {str(booking.id) for booking in kept}


@pytest.mark.django_db
def test_list_filters_and_paginates(admin_client, tourist, guide, make_booking):
    paid = make_booking(tourist=tourist, guide=guide, payment_status=Booking.PAYMENT_PAID)
    for _ in range(3):
        make_booking(tourist=tourist, guide=guide)

    filtered = admin_client.get("/api/booking/", {"paymentStatus": "PAID"})
    assert _ids(filtered) == {str(paid.id)}

    page = admin_client.get("/api/booking/", {"limit": 2, "page": 2})
    body = page.json()
    assert body["count"] == 4
    assert len(body["results"]) == 2


@pytest.mark.django_db
def test_retrieve_includes_projections(tourist_client, tourist, guide, listing, make_booking):
    booking = make_booking(tourist=tourist, guide=guide, listing=listing)

    response = tourist_client.get(f"/api/booking/{booking.id}/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["paymentStatus"] == "PENDING"
    assert data["tourist"] == {"id": tourist.id, "name": "Tina Tourist", "profilePhoto": ""}
    assert data["guide"]["name"] == "Gabe Guide"
    assert data["listing"] == {"id": listing.id, "title": "Old Town Walk", "price": "500.00", "location": "Dhaka"}
    assert data["payment"]["amount"] == "500.00"
    assert data["paymentPreviewUrl"].startswith("https://app.test/payments/preview?")


@pytest.mark.django_db
def test_retrieve_hides_soft_deleted_and_foreign_bookings(
    tourist_client, tourist, second_tourist, guide, make_booking
):
    deleted = make_booking(tourist=tourist, guide=guide)
    deleted.soft_delete()
    foreign = make_booking(tourist=second_tourist, guide=guide)

    assert tourist_client.get(f"/api/booking/{deleted.id}/").status_code == 404
    assert tourist_client.get(f"/api/booking/{foreign.id}/").status_code == 404
    assert tourist_client.get("/api/booking/not-a-uuid/").status_code == 404


@pytest.mark.django_db
def test_status_update_requires_a_field(admin_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)

    response = admin_client.patch(f"/api/booking/{booking.id}/status/", {}, format="json")

    assert response.status_code == 400


@pytest.mark.django_db
def test_status_update_mirrors_payment_status(admin_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)

    response = admin_client.patch(
        f"/api/booking/{booking.id}/status/",
        {"status": "CONFIRMED", "paymentStatus": "PAID"},
        format="json",
    )

    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED
    assert booking.payment_status == Booking.PAYMENT_PAID
    assert Payment.objects.get(booking=booking).status == Payment.PAID


@pytest.mark.django_db
def test_status_update_cannot_unpay_a_paid_booking(admin_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide, payment_status=Booking.PAYMENT_PAID)

    response = admin_client.patch(
        f"/api/booking/{booking.id}/status/", {"paymentStatus": "UNPAID"}, format="json"
    )

    assert response.status_code == 400
    assert "paymentStatus" in response.json()
    booking.refresh_from_db()
    assert booking.payment_status == Booking.PAYMENT_PAID


@pytest.mark.django_db
def test_status_update_from_stale_copy_cannot_unpay(tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)
    stale = Booking.objects.select_related("payment").get(pk=booking.pk)
    event = {
        "id": "evt_paid_meanwhile",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "payment_status": "paid",
                "metadata": {"bookingId": str(booking.id), "paymentId": str(stale.payment.id)},
            }
        },
    }
    assert handle_stripe_event(event).applied is True

    with pytest.raises(ValidationError):
        update_booking_status(stale, payment_status=Booking.PAYMENT_UNPAID)

    booking.refresh_from_db()
    assert booking.payment_status == Booking.PAYMENT_PAID
    assert Payment.objects.get(booking=booking).status == Payment.PAID


@pytest.mark.django_db
def test_status_only_update_from_stale_copy_keeps_paid(tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)
    stale = Booking.objects.get(pk=booking.pk)
    Booking.objects.filter(pk=booking.pk).update(payment_status=Booking.PAYMENT_PAID)
    Payment.objects.filter(booking=booking).update(status=Payment.PAID)

    updated = update_booking_status(stale, status=Booking.CONFIRMED)

    assert updated.status == Booking.CONFIRMED
    assert updated.payment_status == Booking.PAYMENT_PAID
    booking.refresh_from_db()
    assert booking.payment_status == Booking.PAYMENT_PAID


@pytest.mark.django_db
def test_guide_updates_status_only_within_own_bookings(guide_client, tourist, guide, make_guide, make_booking):
    own = make_booking(tourist=tourist, guide=guide)
    other = make_booking(tourist=tourist, guide=make_guide(email="other@example.com"))

    own_response = guide_client.patch(f"/api/booking/{own.id}/status/", {"status": "CONFIRMED"}, format="json")
    other_response = guide_client.patch(f"/api/booking/{other.id}/status/", {"status": "CONFIRMED"}, format="json")

    assert own_response.status_code == 200
    assert other_response.status_code == 404


@pytest.mark.django_db
def test_tourist_cannot_update_status(tourist_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)

    response = tourist_client.patch(f"/api/booking/{booking.id}/status/", {"status": "CONFIRMED"}, format="json")

    assert response.status_code == 403


@pytest.mark.django_db
def test_soft_delete_marks_without_removing(admin_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)

    response = admin_client.patch(f"/api/booking/{booking.id}/soft-delete/")

    assert response.status_code == 200
    assert not Booking.objects.filter(pk=booking.id).exists()
    stored = Booking.all_objects.get(pk=booking.id)
    assert stored.is_deleted is True
    assert stored.deleted_at is not None
    assert Payment.objects.filter(booking_id=booking.id).exists()


@pytest.mark.django_db
def test_hard_delete_removes_booking_and_payment(admin_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)
    booking.soft_delete()

    response = admin_client.delete(f"/api/booking/{booking.id}/")

    assert response.status_code == 204
    assert not Booking.all_objects.filter(pk=booking.id).exists()
    assert not Payment.objects.filter(booking_id=booking.id).exists()


@pytest.mark.django_db
def test_guide_cannot_delete(guide_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)

    assert guide_client.delete(f"/api/booking/{booking.id}/").status_code == 403
    assert guide_client.patch(f"/api/booking/{booking.id}/soft-delete/").status_code == 403
    assert Booking.objects.filter(pk=booking.id).exists()

