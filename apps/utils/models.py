# utils/models.py

"""
Audited base models.

BaseModel rows (members, families, payments, contribution templates) carry
who/where stamps and write one AuditLog row per create, update and delete.
The actor comes from the thread-local request context (utils.context), so
services never pass the request around. Outside a request (management
commands, shell) rows are saved unstamped unless the caller opens a
request_context().
"""

from django.db import models
import uuid
import logging

from .managers import CommunityManager

logger = logging.getLogger(__name__)

# Bookkeeping columns that never appear in an audit diff
UNTRACKED_FIELDS = frozenset((
    'id', 'created_at', 'updated_at', 'created_by_id',
    'updated_by_id', 'created_from_ip', 'updated_from_ip',
))


def _actor(context):
    """(user, ip_address) from a request context dict"""
    if not context:
        return None, None
    return context.get('user'), context.get('ip_address')


def diff_instances(old, new):
    """
    Field-level differences between two instances of the same model.

    Returns:
        dict: {field_name: {'old': str | None, 'new': str | None}}
    """
    changes = {}
    for field in new._meta.concrete_fields:
        if field.name in UNTRACKED_FIELDS:
            continue
        before = getattr(old, field.attname)
        after = getattr(new, field.attname)
        if before != after:
            changes[field.name] = {
                'old': None if before is None else str(before),
                'new': None if after is None else str(after),
            }
    return changes


def write_audit_entry(instance, action, changes=None):
    """Append one AuditLog row describing `action` on `instance`"""
    from utils.context import get_request_context

    context = get_request_context() or {}
    user, ip_address = _actor(context)

    entry = AuditLog.objects.create(
        content_type=instance._meta.label_lower,
        object_id=str(instance.pk),
        object_repr=str(instance)[:200],
        action=action,
        changes=changes or {},
        user_id=str(user.pk) if user else None,
        user_email=(getattr(user, 'email', '') or '') if user else '',
        user_name=(user.get_full_name() or user.get_username()) if user else '',
        ip_address=ip_address,
        user_agent=context.get('user_agent', '')[:255],
        change_reason=getattr(instance, 'change_reason', '') or '',
        session_key=context.get('session_key', ''),
        request_path=context.get('request_path', ''),
    )
    logger.debug(f"Audit {action} on {instance._meta.label} {instance.pk}")
    return entry


# =============================================================================
# BASE MODEL - COMMUNITY DATA
# =============================================================================

class BaseModel(models.Model):
    """
    UUID-keyed community row with audit stamps and an AuditLog trail.

    Set a reason for the next write with set_change_reason(); it is stored on
    the row and copied into the audit entry.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField("Created At", auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField("Updated At", auto_now=True, db_index=True)

    created_by_id = models.CharField(
        "Created By ID", max_length=50, null=True, blank=True, db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID", max_length=50, null=True, blank=True, db_index=True,
        help_text="ID of user who last updated this record"
    )
    created_from_ip = models.GenericIPAddressField("Created From IP", null=True, blank=True)
    updated_from_ip = models.GenericIPAddressField("Updated From IP", null=True, blank=True)

    change_reason = models.CharField("Change Reason", max_length=255, blank=True, null=True)

    objects = CommunityManager()

    class Meta:
        abstract = True

    def _stamp(self, creating, update_fields):
        """
        Copy the request actor onto the audit columns. Returns the
        update_fields to save with (extended when a partial save is stamped).
        """
        from utils.context import get_request_context

        context = get_request_context()
        if not context:
            if creating:
                logger.debug(f"Saving new {self._meta.label} outside a request; audit stamps left empty")
            return update_fields

        user, ip_address = _actor(context)
        if creating:
            self.created_by_id = self.created_by_id or (str(user.pk) if user else None)
            self.created_from_ip = self.created_from_ip or ip_address
        if user:
            self.updated_by_id = str(user.pk)
        if ip_address:
            self.updated_from_ip = ip_address

        if update_fields is not None and not creating:
            return set(update_fields) | {'updated_by_id', 'updated_from_ip', 'updated_at'}
        return update_fields

    def save(self, *args, **kwargs):
        creating = self._state.adding
        update_fields = self._stamp(creating, kwargs.get('update_fields'))
        if update_fields is not None:
            kwargs['update_fields'] = update_fields

        changes = {}
        if not creating:
            previous = type(self)._base_manager.filter(pk=self.pk).first()
            if previous is not None:
                changes = diff_instances(previous, self)

        result = super().save(*args, **kwargs)

        if creating:
            write_audit_entry(self, 'CREATE')
        elif changes:
            write_audit_entry(self, 'UPDATE', changes)
        return result

    def delete(self, *args, **kwargs):
        write_audit_entry(self, 'DELETE')
        return super().delete(*args, **kwargs)

    def set_change_reason(self, reason):
        self.change_reason = reason

    def get_history(self, limit=10):
        """Newest AuditLog entries for this row"""
        return AuditLog.objects.filter(
            content_type=self._meta.label_lower,
            object_id=str(self.pk),
        ).order_by('-timestamp')[:limit]


# =============================================================================
# SYSTEM MODEL - CROSS-COMMUNITY DATA
# =============================================================================

class SystemModel(models.Model):
    """
    UUID-keyed row that sits above any single community (the community
    registry, user profiles, invitations looked up by token). Not audited.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField("Created At", auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField("Updated At", auto_now=True, db_index=True)

    class Meta:
        abstract = True


# =============================================================================
# AUDIT LOG
# =============================================================================

class AuditLog(models.Model):
    """One create/update/delete of a BaseModel row: what, who, from where and why"""

    ACTION_CHOICES = (
        ('CREATE', 'Created'),
        ('UPDATE', 'Updated'),
        ('DELETE', 'Deleted'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    content_type = models.CharField("Model Type", max_length=100, db_index=True)
    object_id = models.CharField("Object ID", max_length=100, db_index=True)
    object_repr = models.CharField("Object Representation", max_length=200)
    action = models.CharField("Action", max_length=10, choices=ACTION_CHOICES, db_index=True)
    changes = models.JSONField(
        "Changes", default=dict, blank=True,
        help_text="Dictionary of field changes: {'field_name': {'old': 'value', 'new': 'value'}}"
    )

    user_id = models.CharField("User ID", max_length=50, db_index=True, null=True, blank=True)
    user_email = models.EmailField("User Email", max_length=255, blank=True)
    user_name = models.CharField("User Name", max_length=255, blank=True)
    timestamp = models.DateTimeField("Timestamp", auto_now_add=True, db_index=True)

    ip_address = models.GenericIPAddressField("IP Address", null=True, blank=True)
    user_agent = models.TextField("User Agent", blank=True)
    change_reason = models.CharField("Change Reason", max_length=255, blank=True)
    session_key = models.CharField("Session Key", max_length=100, blank=True)
    request_path = models.CharField("Request Path", max_length=255, blank=True)

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['content_type', 'object_id'], name='utils_audit_content_idx'),
            models.Index(fields=['user_id', 'timestamp'], name='utils_audit_user_ts_idx'),
        ]
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"

    def __str__(self):
        return f"{self.action} {self.content_type} {self.object_id} at {self.timestamp}"

    def get_changes_display(self):
        if not self.changes:
            return "No field changes recorded"
        return "\n".join(
            f"{field}: '{change.get('old', 'N/A')}' → '{change.get('new', 'N/A')}'"
            for field, change in self.changes.items()
        )
