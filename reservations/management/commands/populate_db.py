from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from reservations import catalog, inventory
from reservations.exceptions import DuplicateInventory
from reservations.models import StaffProfile


class Command(BaseCommand):
    help = 'Populate database with room inventory and an initial superadmin'

    def add_arguments(self, parser):
        parser.add_argument('--rooms-per-type', type=int, default=5)
        parser.add_argument('--admin-username', default='admin')
        parser.add_argument('--admin-password', default=None)

    def handle(self, *args, **options):
        for room_type in catalog.all_room_types():
            try:
                inventory.create(room_type.id, options['rooms_per_type'])
            except DuplicateInventory:
                self.stdout.write(f'Inventory for {room_type.id} already exists')
            else:
                self.stdout.write(f"Created inventory: {room_type.display_name} x{options['rooms_per_type']}")

        if options['admin_password']:
            User = get_user_model()
            user, created = User.objects.get_or_create(username=options['admin_username'])
            if created:
                user.set_password(options['admin_password'])
                user.save()
            StaffProfile.objects.get_or_create(user=user, defaults={'role': StaffProfile.Role.SUPERADMIN})
            self.stdout.write(f"Superadmin '{user.username}' ready")

        self.stdout.write(
            self.style.SUCCESS('Successfully populated database with sample data')
        )
