from __future__ import annotations

from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group, Permission


APP = "escalas"

COORDINATOR_PERMS = {
    # Cadastros
    "view_ministry", "add_ministry", "change_ministry", "delete_ministry",
    "view_area", "add_area", "change_area", "delete_area",
    "view_servant", "add_servant", "change_servant", "delete_servant",
    "view_regularevent", "add_regularevent", "change_regularevent", "delete_regularevent",
    # Períodos e eventos
    "view_scheduleperiod", "add_scheduleperiod", "change_scheduleperiod", "delete_scheduleperiod",
    "view_scheduleevent", "add_scheduleevent", "change_scheduleevent", "delete_scheduleevent",
    # Escala
    "view_scheduleassignment", "add_scheduleassignment", "change_scheduleassignment", "delete_scheduleassignment",
    "view_servantavailability",
    # Agendamentos e auditoria (somente leitura)
    "view_booking", "view_environment", "view_auditlog",
}

LEADER_PERMS = {
    # Leituras gerais
    "view_ministry", "view_area", "view_servant", "view_regularevent",
    "view_scheduleperiod", "view_scheduleevent", "view_servantavailability",
    # Monta a escala
    "view_scheduleassignment", "add_scheduleassignment", "change_scheduleassignment", "delete_scheduleassignment",
}

ROLES = (
    ("Coordenador", COORDINATOR_PERMS),
    ("Líder", LEADER_PERMS),
)


class Command(BaseCommand):
    help = "Cria/sincroniza os grupos de acesso: Admin, Coordenador, Líder"

    def handle(self, *args, **kwargs):
        admin, _ = Group.objects.get_or_create(name="Admin")

        # ===== Admin: recebe TODAS as permissões =====
        all_perms = Permission.objects.all()
        admin.permissions.set(all_perms)
        self.stdout.write(self.style.SUCCESS(f"[Admin] total perms: {all_perms.count()}"))

        for name, codenames in ROLES:
            group, _ = Group.objects.get_or_create(name=name)
            perms = Permission.objects.filter(content_type__app_label=APP, codename__in=codenames)
            group.permissions.set(perms)
            self.stdout.write(self.style.SUCCESS(f"[{name}] applied perms: {perms.count()}"))
            missing = codenames - set(perms.values_list("codename", flat=True))
            if missing:
                self.stdout.write(
                    self.style.WARNING(f"[{name}] missing codenames (confira migrações/models): {sorted(missing)}")
                )

        self.stdout.write(self.style.SUCCESS("Roles created/updated."))
