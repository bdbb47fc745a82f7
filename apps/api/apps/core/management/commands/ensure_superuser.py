"""
Management command to ensure the bootstrap admin exists (for Docker startup).
"""
import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from apps.authz.models import Role, RoleChoices, UserRole


class Command(BaseCommand):
    help = 'Create the admin superuser if missing and make sure it holds the Admin role'

    def handle(self, *args, **options):
        User = get_user_model()

        email = os.environ.get('DJANGO_SUPERUSER_EMAIL', 'admin@example.com')
        password = os.environ.get('DJANGO_SUPERUSER_PASSWORD', 'admin123dev')

        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_superuser(email=email, password=password)
            self.stdout.write(
                self.style.SUCCESS(f'Superuser "{email}" created successfully')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'Superuser "{email}" already exists')
            )

        # API permissions are role based; is_superuser alone grants nothing there
        admin_role, _ = Role.objects.get_or_create(name=RoleChoices.ADMIN)
        _, created = UserRole.objects.get_or_create(user=user, role=admin_role)
        if created:
            self.stdout.write(self.style.SUCCESS(f'Admin role assigned to "{email}"'))
