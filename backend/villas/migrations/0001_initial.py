import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import villas.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Villa',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Villa Name', max_length=255)),
                ('description', models.TextField()),
                ('price', models.DecimalField(decimal_places=2, help_text='Price per night', max_digits=14)),
                ('capacity', models.PositiveIntegerField(help_text='Maximum number of guests')),
                ('status', models.CharField(choices=[('available', 'Available'), ('booked', 'Booked'), ('maintenance', 'Maintenance')], default='available', max_length=20)),
                ('facilities', models.JSONField(default=villas.models.default_facilities, help_text='Boolean flags: bathroom, wifi, bed, parking, kitchen, ac, tv, pool')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(blank=True, help_text='Owner account; receives the owner share of the revenue', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='villas', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'villas',
            },
        ),
        migrations.CreateModel(
            name='VillaImage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.URLField(max_length=500)),
                ('public_id', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('villa', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='images', to='villas.villa')),
            ],
            options={
                'db_table': 'villa_images',
                'ordering': ['id'],
            },
        ),
    ]
