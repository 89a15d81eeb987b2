# core/management/commands/initialize_community.py

"""
Create a community with its owner and the starter contribution templates.

USAGE EXAMPLES:
===============

python manage.py initialize_community --name "Umunna Houston" --owner chair@example.com

# Custom tier ages and currency
python manage.py initialize_community --name "Umunna Houston" --owner chair@example.com \
    --tier1-age 16 --tier2-age 21 --currency '$' --currency-code USD

# Without the starter templates
python manage.py initialize_community --name "Umunna Houston" --owner chair@example.com --no-templates
"""

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError
import logging

from core.services import create_community, DEFAULT_TEMPLATES
from members.models import Member

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Create a community owned by an existing user, with starter contribution templates'

    def add_arguments(self, parser):
        parser.add_argument('--name', required=True, help='Community name')
        parser.add_argument('--owner', required=True, help='Email or username of the owning user')
        parser.add_argument('--timezone', default='UTC')
        parser.add_argument('--tier1-age', type=int)
        parser.add_argument('--tier2-age', type=int)
        parser.add_argument('--currency', help='Currency symbol, e.g. ₦')
        parser.add_argument('--currency-code', help='ISO 4217 code, e.g. NGN')
        parser.add_argument('--year-of-birth', type=int, help="Owner's year of birth")
        parser.add_argument(
            '--gender',
            choices=[value for value, _ in Member.GENDER_CHOICES],
            help="Owner's gender"
        )
        parser.add_argument(
            '--no-templates',
            action='store_true',
            help='Skip the starter contribution templates'
        )

    def handle(self, *args, **options):
        owner = (
            User.objects.filter(email__iexact=options['owner']).first()
            or User.objects.filter(username=options['owner']).first()
        )
        if owner is None:
            raise CommandError(f"User '{options['owner']}' not found")

        result = create_community(
            owner,
            {
                'name': options['name'],
                'timezone': options['timezone'],
                'tier1_age': options['tier1_age'],
                'tier2_age': options['tier2_age'],
                'currency': options['currency'],
                'currency_code': options['currency_code'],
                'year_of_birth': options['year_of_birth'],
                'gender': options['gender'],
            },
            with_default_templates=not options['no_templates'],
        )
        if not result.success:
            raise CommandError(result.message)

        community = result.obj
        self.stdout.write(self.style.SUCCESS(f"✓ Created '{community.name}' ({community.pk})"))
        self.stdout.write(f"  Owner: {owner.email or owner.get_username()}")
        self.stdout.write(f"  Tiers: {community.tier1_age} / {community.tier2_age}  Currency: {community.currency}")
        if not options['no_templates']:
            for template in DEFAULT_TEMPLATES:
                self.stdout.write(f"  Template: {template['name']} ({template['frequency']})")
