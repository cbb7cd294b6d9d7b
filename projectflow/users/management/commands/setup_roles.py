from collections import defaultdict
from contextlib import suppress

from django.apps import apps
from django.contrib.auth.models import Group
from django.contrib.auth.models import Permission
from django.contrib.contenttypes.models import ContentType
from django.core.management.base import BaseCommand
from django.utils.translation import gettext as _

from projectflow.users.api.permissions import ROLE_ADMIN
from projectflow.users.api.permissions import ROLE_DEVELOPER
from projectflow.users.api.permissions import ROLE_PROJECT_MANAGER

FULL_ACTIONS = ("add", "change", "delete", "view")
MANAGE_ACTIONS = ("add", "change", "view")
READ_ACTIONS = ("view",)

ROLE_APP_ACTIONS = {
    ROLE_ADMIN: {
        "projects": FULL_ACTIONS,
        "tasks": FULL_ACTIONS,
        "timetracking": FULL_ACTIONS,
        "attachments": FULL_ACTIONS,
        "users": FULL_ACTIONS,
    },
    ROLE_PROJECT_MANAGER: {
        "projects": FULL_ACTIONS,
        "tasks": FULL_ACTIONS,
        "timetracking": MANAGE_ACTIONS,
        "attachments": FULL_ACTIONS,
        "users": READ_ACTIONS,
    },
    ROLE_DEVELOPER: {
        "projects": READ_ACTIONS,
        "tasks": MANAGE_ACTIONS,
        "timetracking": MANAGE_ACTIONS,
        "attachments": MANAGE_ACTIONS,
        "users": READ_ACTIONS,
    },
}


class Command(BaseCommand):
    help = _("Create the default role groups and their model permissions")

    def handle(self, *args, **options):
        role_perm_ids: dict[str, set[int]] = defaultdict(set)

        for app_label in sorted(self._target_app_labels()):
            for model in self._collect_app_models(app_label):
                ct = ContentType.objects.get_for_model(model)
                perms_by_codename = {
                    perm.codename: perm
                    for perm in Permission.objects.filter(content_type=ct)
                }
                model_name = model._meta.model_name  # noqa: SLF001
                for role_name, app_rules in ROLE_APP_ACTIONS.items():
                    for action in app_rules.get(app_label, ()):
                        perm = perms_by_codename.get(f"{action}_{model_name}")
                        if perm:
                            role_perm_ids[role_name].add(perm.pk)

        for role_name in ROLE_APP_ACTIONS:
            group, _created = Group.objects.get_or_create(name=role_name)
            perms = Permission.objects.filter(pk__in=role_perm_ids[role_name])
            group.permissions.set(list(perms))
            msg = f"Ensured group '{role_name}' with permissions ({perms.count()})"
            self.stdout.write(self.style.SUCCESS(msg))

        self.stdout.write(self.style.SUCCESS("Role setup complete"))

    def _target_app_labels(self):
        labels = set()
        for rules in ROLE_APP_ACTIONS.values():
            labels.update(rules.keys())
        return labels

    def _collect_app_models(self, label):
        with suppress(LookupError):
            return list(apps.get_app_config(label).get_models())
        return []
