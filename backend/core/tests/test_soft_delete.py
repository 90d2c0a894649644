import pytest

from bookings.models import Booking
from core.admin import restore_selected, soft_delete_selected
from listings.models import Listing


@pytest.mark.django_db
def test_soft_delete_hides_row_from_default_manager(listing):
    listing.soft_delete()

    assert not Listing.objects.filter(pk=listing.pk).exists()
    stored = Listing.all_objects.get(pk=listing.pk)
    assert stored.is_deleted is True
    assert stored.deleted_at is not None


@pytest.mark.django_db
def test_restore_brings_row_back(tourist_client, tourist, guide, make_booking):
    booking = make_booking(tourist=tourist, guide=guide)
    booking.soft_delete()

    booking.restore()

    stored = Booking.objects.get(pk=booking.pk)
    assert stored.deleted_at is None
    assert tourist_client.get(f"/api/booking/{booking.id}/").status_code == 200


@pytest.mark.django_db
def test_admin_actions_mark_and_restore_selected_rows(tourist, guide, make_booking):
    kept = make_booking(tourist=tourist, guide=guide)
    targets = [make_booking(tourist=tourist, guide=guide) for _ in range(2)]
    selected = Booking.all_objects.filter(pk__in=[booking.pk for booking in targets])

    soft_delete_selected(None, None, selected)

    assert set(Booking.objects.values_list("pk", flat=True)) == {kept.pk}
    assert Booking.all_objects.deleted().count() == 2

    restore_selected(None, None, Booking.all_objects.deleted())

    assert Booking.objects.count() == 3
