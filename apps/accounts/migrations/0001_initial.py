import uuid
from zoneinfo import available_timezones

import accounts.models
import django.db.models.deletion
import django_countries.fields
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Community',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='Updated At')),
                ('name', models.CharField(max_length=191)),
                ('slug', models.SlugField(max_length=191, unique=True)),
                ('country', django_countries.fields.CountryField(default='NG', max_length=2)),
                ('timezone', models.CharField(choices=[(tz, tz) for tz in sorted(available_timezones())], default='UTC', max_length=50)),
                ('tier1_age', models.PositiveIntegerField(default=accounts.models.default_tier1_age, help_text="Members younger than this are 'Under 18'", verbose_name='Tier 1 Age')),
                ('tier2_age', models.PositiveIntegerField(default=accounts.models.default_tier2_age, help_text='Members this age and older fall into Group 2', verbose_name='Tier 2 Age')),
                ('currency', models.CharField(default=accounts.models.default_currency, max_length=8, verbose_name='Currency Symbol')),
                ('currency_code', models.CharField(default='NGN', help_text='ISO 4217 code used in exported reports', max_length=3, verbose_name='Currency Code')),
                ('subscription_status', models.CharField(choices=[('active', 'Active'), ('trialing', 'Trialing'), ('past_due', 'Past Due'), ('canceled', 'Canceled'), ('incomplete', 'Incomplete')], default='trialing', max_length=20)),
                ('plan_id', models.CharField(default='free', max_length=50)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='owned_communities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Community',
                'verbose_name_plural': 'Communities',
                'db_table': 'communities',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='Updated At')),
                ('display_name', models.CharField(blank=True, max_length=150)),
                ('photo', models.ImageField(blank=True, null=True, upload_to=accounts.models.avatar_upload_to)),
                ('avatar_token', models.CharField(blank=True, max_length=64)),
                ('failed_login_attempts', models.PositiveIntegerField(default=0)),
                ('account_locked_until', models.DateTimeField(blank=True, null=True)),
                ('last_login_at', models.DateTimeField(blank=True, null=True)),
                ('last_activity', models.DateTimeField(blank=True, null=True)),
                ('primary_community', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='primary_profiles', to='accounts.community')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'User Profile',
                'verbose_name_plural': 'User Profiles',
                'db_table': 'user_profiles',
            },
        ),
    ]
