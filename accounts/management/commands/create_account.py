import os

from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.models import Account
from core.constants import UserRole


class Command(BaseCommand):
    help = 'Create an account together with its OWNER user'

    def add_arguments(self, parser):
        parser.add_argument('name', help='Agency / organisation name')
        parser.add_argument('username', help='Login of the owner user')
        parser.add_argument('--email', default='')
        parser.add_argument('--currency', default=None, help='Default currency of new leases (ISO 4217)')
        parser.add_argument(
            '--password',
            default=None,
            help='Owner password (defaults to the RENTAL_OWNER_PASSWORD environment variable)',
        )
        parser.add_argument('--superuser', action='store_true', help='Also grant Django admin access')

    def handle(self, *args, **options):
        User = get_user_model()

        if User.objects.filter(username=options['username']).exists():
            raise CommandError(f"User {options['username']} already exists")

        password = options['password'] or os.environ.get('RENTAL_OWNER_PASSWORD')
        if not password:
            raise CommandError("Provide --password or set RENTAL_OWNER_PASSWORD")

        with transaction.atomic():
            account = Account(name=options['name'])
            if options['currency']:
                account.default_currency = options['currency'].upper()
            account.save()

            user = User(
                username=options['username'],
                email=options['email'],
                is_staff=options['superuser'],
                is_superuser=options['superuser'],
                is_active=True,
                account=account,
                role=UserRole.OWNER,
            )
            user.set_password(password)
            user.save()

        self.stdout.write(self.style.SUCCESS(f"Created account '{account.name}' (id {account.id})"))
        self.stdout.write(self.style.SUCCESS(f"Owner user: {user.username}"))
