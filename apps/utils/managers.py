# utils/managers.py

from django.db import models


class CommunityQuerySet(models.QuerySet):
    """QuerySet for rows that belong to one community."""

    def for_community(self, community):
        if community is None:
            return self.none()
        return self.filter(community=community)


class CommunityManager(models.Manager.from_queryset(CommunityQuerySet)):
    pass
