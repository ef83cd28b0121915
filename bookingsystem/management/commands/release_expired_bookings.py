from django.core.management.base import BaseCommand
from bookingsystem.services import BookingService
from utils.constants import BookingMessage


class Command(BaseCommand):
    help = "Cancel unpaid bookings whose hold has expired and return their seats to the trip."

    def handle(self, *args, **options):
        released = BookingService.release_expired_bookings()
        self.stdout.write(self.style.SUCCESS(BookingMessage.BOOKINGS_RELEASED.format(count=released)))
