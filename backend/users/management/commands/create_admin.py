from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from users.models import UserProfile


class Command(BaseCommand):
    help = 'Create the first admin account (users are otherwise created by admins only)'

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument('password')

    def handle(self, *args, **options):
        username = options['username']
        password = options['password']

        if len(password) < 6:
            raise CommandError('Password must be at least 6 characters')

        if User.objects.filter(username=username).exists():
            self.stdout.write(f'User {username} already exists')
            return

        with transaction.atomic():
            user = User.objects.create_user(username=username, password=password)
            UserProfile.objects.create(user=user, role=UserProfile.Role.ADMIN)

        self.stdout.write(
            self.style.SUCCESS(f'Successfully created admin {username}')
        )
