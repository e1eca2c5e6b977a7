from decimal import Decimal
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.db import transaction
from backend.catalog.models import Sweet

User = get_user_model()

SAMPLE_SWEETS = [
    {'name': 'Gulab Jamun', 'category': 'Indian', 'price': Decimal('50.00'), 'quantity': 100},
    {'name': 'Rasgulla', 'category': 'Indian', 'price': Decimal('40.00'), 'quantity': 80},
    {'name': 'Jalebi', 'category': 'Indian', 'price': Decimal('45.00'), 'quantity': 60},
    {'name': 'Kaju Katli', 'category': 'Indian', 'price': Decimal('80.00'), 'quantity': 50},
    {'name': 'Barfi', 'category': 'Indian', 'price': Decimal('55.00'), 'quantity': 70},
]


class Command(BaseCommand):
    help = 'Create the initial admin account and a sample sweet catalog'

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default='admin@sweetflow.com', help='Email of the admin account')
        parser.add_argument('--admin-password', default='admin123', help='Password of the admin account')
        parser.add_argument('--skip-sweets', action='store_true', help='Only create the admin account')

    @transaction.atomic
    def handle(self, *args, **options):
        email = options['admin_email']
        password = options['admin_password']

        if User.objects.filter(email=email).exists():
            self.stdout.write(self.style.WARNING(f'Admin user already exists: {email}'))
        else:
            User.objects.create_superuser(email=email, password=password)
            self.stdout.write(self.style.SUCCESS(f'Admin user created: {email}'))
            self.stdout.write('Please change the password after first login!')

        if options['skip_sweets']:
            return

        if Sweet.objects.exists():
            self.stdout.write(self.style.WARNING('Catalog already has sweets, skipping samples'))
            return

        for data in SAMPLE_SWEETS:
            Sweet.objects.create(**data)
        self.stdout.write(self.style.SUCCESS(f'Created {len(SAMPLE_SWEETS)} sample sweets'))
