import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CustomContribution',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, max_length=255, null=True, verbose_name='Change Reason')),
                ('name', models.CharField(max_length=120, verbose_name='Name')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Amount')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('frequency', models.CharField(choices=[('one-time', 'One-time'), ('monthly', 'Monthly')], default='one-time', max_length=10, verbose_name='Frequency')),
                ('tiers', models.JSONField(blank=True, default=list, help_text="Tier labels, e.g. ['Group 1 (18-24)', 'Group 2 (25+)']", verbose_name='Applies To Tiers')),
                ('community', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='custom_contributions', to='accounts.community')),
            ],
            options={
                'verbose_name': 'Contribution Template',
                'verbose_name_plural': 'Contribution Templates',
                'db_table': 'custom_contributions',
                'ordering': ['name'],
            },
        ),
    ]
