from datetime import timedelta
from uuid import uuid4

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import Guide, Tourist, User
from bookings.models import Booking
from listings.models import Listing
from payments.models import Payment


SEED_PASSWORD = "Tourbook123!"
SUPERUSER_EMAIL = "admin@tourbook.test"
SUPERUSER_PASSWORD = "AdminTourbook123!"


class Command(BaseCommand):
    help = "Populate the local development database with sample data."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Creating staff"))
            self._ensure_superuser()
            self._ensure_user(email="ops@tourbook.test", name="Omar Ops", role=User.ADMIN)

            self.stdout.write(self.style.MIGRATE_HEADING("Creating guides & listings"))
            rafi = self._ensure_guide(email="rafi@tourbook.test", name="Rafi Rahman", fee_cents=45000)
            nadia = self._ensure_guide(email="nadia@tourbook.test", name="Nadia Noor", fee_cents=60000)
            old_town = self._ensure_listing(
                guide=rafi, title="Old Dhaka Heritage Walk", location="Dhaka", price_cents=35000
            )
            self._ensure_listing(
                guide=rafi, title="Buriganga Sunset Boat Ride", location="Dhaka", price_cents=52000
            )
            tea_trail = self._ensure_listing(
                guide=nadia, title="Sreemangal Tea Garden Trail", location="Sylhet", price_cents=80000
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating tourists"))
            tina = self._ensure_tourist(email="tina@example.test", name="Tina Traveller")
            sam = self._ensure_tourist(email="sam@example.test", name="Sam Backpacker")

            self.stdout.write(self.style.MIGRATE_HEADING("Creating bookings"))
            if Booking.all_objects.exists():
                self.stdout.write(self.style.WARNING("Bookings already present; skipping sample bookings."))
            else:
                now = timezone.now().replace(minute=0, second=0, microsecond=0)
                self._create_booking(tourist=tina, guide=rafi, listing=old_town, when=now + timedelta(days=7))
                self._create_booking(
                    tourist=tina,
                    guide=nadia,
                    listing=tea_trail,
                    when=now + timedelta(days=21),
                    payment_status=Booking.PAYMENT_PAID,
                )
                self._create_booking(tourist=sam, guide=nadia, when=now + timedelta(days=10))

        self.stdout.write(self.style.SUCCESS("Development data ready."))
        self.stdout.write(self.style.NOTICE(f"All seeded users share password: {SEED_PASSWORD}"))
        self.stdout.write(self.style.NOTICE(f"Admin superuser {SUPERUSER_EMAIL} password: {SUPERUSER_PASSWORD}"))

    def _ensure_user(self, email: str, name: str, role: str) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={"username": email, "display_name": name, "role": role},
        )
        if user.role != role:
            user.role = role
            user.save(update_fields=["role"])
        if created or not user.has_usable_password():
            user.set_password(SEED_PASSWORD)
            user.save(update_fields=["password"])
        return user

    def _ensure_guide(self, email: str, name: str, fee_cents: int) -> Guide:
        user = self._ensure_user(email=email, name=name, role=User.GUIDE)
        guide, created = Guide.all_objects.get_or_create(
            user=user,
            defaults={"name": name, "email": email, "fee_cents": fee_cents},
        )
        if guide.is_deleted:
            guide.restore()
        if created:
            self.stdout.write(self.style.NOTICE(f"Added guide {name} ({fee_cents / 100:.2f})"))
        return guide

    def _ensure_tourist(self, email: str, name: str) -> Tourist:
        user = self._ensure_user(email=email, name=name, role=User.TOURIST)
        tourist, _ = Tourist.all_objects.get_or_create(user=user, defaults={"name": name, "email": email})
        if tourist.is_deleted:
            tourist.restore()
        return tourist

    def _ensure_listing(self, *, guide: Guide, title: str, location: str, price_cents: int) -> Listing:
        listing, _ = Listing.all_objects.get_or_create(
            guide=guide,
            title=title,
            defaults={
                "location": location,
                "price_cents": price_cents,
                "description": f"Sample itinerary for {title}.",
            },
        )
        return listing

    def _create_booking(
        self,
        *,
        tourist: Tourist,
        guide: Guide,
        when,
        listing: Listing | None = None,
        payment_status: str = Booking.PAYMENT_PENDING,
    ) -> Booking:
        booking = Booking.objects.create(
            tourist=tourist,
            guide=guide,
            listing=listing,
            booking_date=when,
            payment_status=payment_status,
        )
        Payment.objects.create(
            booking=booking,
            amount_cents=listing.price_cents if listing else guide.fee_cents,
            currency=settings.STRIPE_CURRENCY,
            transaction_id=uuid4().hex,
            stripe_checkout_session=f"cs_seed_{uuid4().hex[:24]}",
            status=payment_status,
        )
        return booking

    def _ensure_superuser(self) -> User:
        user, created = User.objects.get_or_create(
            email=SUPERUSER_EMAIL,
            defaults={
                "username": SUPERUSER_EMAIL,
                "display_name": "Admin User",
                "role": User.SUPER_ADMIN,
                "is_staff": True,
                "is_superuser": True,
            },
        )
        flag_updates = {}
        if not user.is_staff:
            flag_updates["is_staff"] = True
        if not user.is_superuser:
            flag_updates["is_superuser"] = True
        if flag_updates:
            for attr, value in flag_updates.items():
                setattr(user, attr, value)
            user.save(update_fields=list(flag_updates.keys()))
        if created or not user.has_usable_password():
            user.set_password(SUPERUSER_PASSWORD)
            user.save(update_fields=["password"])
        return user
