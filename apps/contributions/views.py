# contributions/views.py

from django.shortcuts import render
import logging

from core.decorators import community_required
from members.services import CommunityService

logger = logging.getLogger(__name__)


@community_required
def contribution_list(request, community):
    """Templates with the number of members each one currently applies to"""
    service = CommunityService(community, user=request.user)
    members = service.members

    templates = []
    for template in service.contributions:
        templates.append({
            'template': template,
            'member_count': sum(1 for member in members if template.applies_to(member.tier)),
        })

    context = {
        'community': community,
        'templates': templates,
        'tier_choices': service.tier_choices,
        'is_admin': request.community_role in ('owner', 'admin'),
    }
    return render(request, 'contributions/list.html', context)
