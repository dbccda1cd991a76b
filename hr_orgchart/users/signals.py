from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db.models.signals import post_save
from django.dispatch import receiver

ROLE_VIEWER = "Employee"


@receiver(post_save, sender=get_user_model())
def add_default_viewer_group(sender, instance, created, **kwargs):
    """Put every new user in the read-only 'Employee' group."""

    if not created:
        return

    group, _ = Group.objects.get_or_create(name=ROLE_VIEWER)
    instance.groups.add(group)
