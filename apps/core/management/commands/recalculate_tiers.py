# core/management/commands/recalculate_tiers.py

"""
Recompute every member's tier and expected contribution from their year of
birth, join date and the community's current templates.

USAGE EXAMPLES:
===============

# One community (id or slug)
python manage.py recalculate_tiers --community igbo-union-ab12cd

# Every community
python manage.py recalculate_tiers --all

# Show how many members would change without writing
python manage.py recalculate_tiers --all --dry-run
"""

import uuid

from django.core.management.base import BaseCommand, CommandError
from django.db.models import Q
import logging

from accounts.models import Community
from members.services import CommunityService
from utils.context import request_context

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Recalculate member tiers and contributions for one or all communities'

    def add_arguments(self, parser):
        parser.add_argument(
            '--community',
            type=str,
            help='Id or slug of the community to recalculate'
        )
        parser.add_argument(
            '--all',
            action='store_true',
            help='Recalculate every community'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Count the members that would change without saving anything'
        )

    def handle(self, *args, **options):
        communities = self._get_communities(options)
        dry_run = options['dry_run']

        if not communities:
            self.stdout.write(self.style.WARNING('No communities found.'))
            return

        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No members will be saved\n'))

        total_updated = 0
        errors = []

        for community in communities:
            # Audit entries for changed members name the command as their source
            with request_context(request_path='manage.py recalculate_tiers'):
                result = CommunityService(community).recalculate_tiers(dry_run=dry_run)
            if not result.success:
                errors.append((community, result.message))
                self.stderr.write(self.style.ERROR(f"✗ {community.name}: {result.message}"))
                continue

            total_updated += result.obj
            verb = 'would be updated' if dry_run else 'updated'
            self.stdout.write(self.style.SUCCESS(f"✓ {community.name}: {result.obj} member(s) {verb}"))

        self.stdout.write(f"\nCommunities: {len(communities)}  Members changed: {total_updated}")

        if errors:
            raise CommandError(f'Recalculation failed for {len(errors)} community(ies)')

    def _get_communities(self, options):
        if options['all']:
            return list(Community.objects.order_by('name'))

        identifier = options.get('community')
        if not identifier:
            raise CommandError("Must specify either --community or --all")

        lookup = Q(slug=identifier)
        try:
            lookup |= Q(pk=uuid.UUID(identifier))
        except ValueError:
            pass

        community = Community.objects.filter(lookup).first()
        if community is None:
            raise CommandError(f"Community '{identifier}' not found")
        return [community]
