from collections import defaultdict
from contextlib import suppress

from django.apps import apps
from django.contrib.auth.models import Group
from django.contrib.auth.models import Permission
from django.contrib.contenttypes.models import ContentType
from django.core.management.base import BaseCommand
from django.utils.translation import gettext as _

FULL_ACTIONS = ("add", "change", "delete", "view")
MANAGE_ACTIONS = ("add", "change", "view")
READ_ACTIONS = ("view",)

ROLE_APP_ACTIONS = {
    "Manager": {
        "employees": FULL_ACTIONS,
        "orgchart": FULL_ACTIONS,
        "users": MANAGE_ACTIONS,
        "audit": READ_ACTIONS,
    },
    "Employee": {
        "employees": READ_ACTIONS,
        "orgchart": READ_ACTIONS,
    },
}

# Everyone may keep private chart profiles.
ROLE_MODEL_ACTIONS = {
    ("orgchart", "customorgchart"): {
        "Employee": FULL_ACTIONS,
    },
}


class Command(BaseCommand):
    help = _("Create default RBAC groups and permissions")

    def handle(self, *args, **options):
        roles = self._build_roles()
        self._apply_roles(roles)
        self.stdout.write(self.style.SUCCESS("RBAC setup complete"))

    def _target_models(self):
        labels = set()
        for rules in ROLE_APP_ACTIONS.values():
            labels.update(rules.keys())
        models = []
        for label in sorted(labels):
            with suppress(LookupError):
                models.extend(apps.get_app_config(label).get_models())
        return models

    def _build_roles(self):
        admin_perm_ids: set[int] = set()
        role_perm_ids: dict[str, set[int]] = defaultdict(set)

        for model in self._target_models():
            ct = ContentType.objects.get_for_model(model)
            perms_by_codename = {
                perm.codename: perm
                for perm in Permission.objects.filter(content_type=ct)
            }
            if not perms_by_codename:
                continue
            admin_perm_ids.update(perm.pk for perm in perms_by_codename.values())

            model_name = model._meta.model_name  # noqa: SLF001
            app_label = model._meta.app_label  # noqa: SLF001
            for role_name, app_rules in ROLE_APP_ACTIONS.items():
                actions = app_rules.get(app_label, ())
                self._add_actions(
                    role_perm_ids[role_name], perms_by_codename, model_name, actions
                )
            for role_name, actions in ROLE_MODEL_ACTIONS.get(
                (app_label, model_name), {}
            ).items():
                self._add_actions(
                    role_perm_ids[role_name], perms_by_codename, model_name, actions
                )

        roles = {"Admin": admin_perm_ids}
        roles.update(role_perm_ids)
        return roles

    def _add_actions(self, bucket, perms_by_codename, model_name, actions):
        for action in actions:
            perm = perms_by_codename.get(f"{action}_{model_name}")
            if perm:
                bucket.add(perm.pk)

    def _apply_roles(self, roles):
        for role_name, perm_ids in roles.items():
            group, _ = Group.objects.get_or_create(name=role_name)
            group.permissions.set(list(Permission.objects.filter(pk__in=perm_ids)))
            msg = f"Ensured group '{role_name}' with permissions ({len(perm_ids)})"
            self.stdout.write(self.style.SUCCESS(msg))
