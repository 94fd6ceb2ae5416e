"""
Management command to create or promote an inbox administrator.

Usage:
    python manage.py create_admin --email admin@example.com --username admin
    python manage.py create_admin --email existing@example.com   # promote
"""
import getpass

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from accounts.models import User


class Command(BaseCommand):
    help = 'Creates an admin user, or promotes an existing user to admin'

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--username', help='Defaults to the part of the email before @')
        parser.add_argument('--first-name', default='')
        parser.add_argument('--last-name', default='')
        parser.add_argument(
            '--password',
            help='Prompted for when creating a new user and not given'
        )

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        username = options['username'] or email.split('@')[0]
        password = options['password']

        with transaction.atomic():
            user = User.objects.filter(email=email).first()

            if user:
                self.stdout.write(
                    self.style.WARNING(f'User with email {email} already exists.')
                )
                user.role = User.UserRole.ADMIN
                user.is_active = True
                user.is_staff = True
                if password:
                    user.set_password(password)
                user.save()

                self.stdout.write(
                    self.style.SUCCESS(f'✓ Promoted existing user: {user.email}')
                )
            else:
                if not password:
                    password = getpass.getpass('Password: ')
                    if password != getpass.getpass('Confirm Password: '):
                        raise CommandError('Passwords do not match')
                if len(password) < 8:
                    raise CommandError('Password must be at least 8 characters long')

                user = User.objects.create_user(
                    username=username,
                    email=email,
                    password=password,
                    first_name=options['first_name'],
                    last_name=options['last_name'],
                    role=User.UserRole.ADMIN,
                    is_staff=True,
                )

                self.stdout.write(
                    self.style.SUCCESS(f'✓ Created new admin: {user.email}')
                )

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write(f'Email:     {user.email}')
        self.stdout.write(f'Username:  {user.username}')
        self.stdout.write(f'Role:      {user.get_role_display()}')
        self.stdout.write('=' * 60)
        self.stdout.write('\nPOST /api/auth/login/ with email and password, then send')
        self.stdout.write('   Authorization: Bearer <access_token>')
