from __future__ import annotations

from django.core.management.base import BaseCommand
from django.contrib.auth.models import User

from escalas.domain.models import Area, Ministry, Servant

DEMO_MINISTRY = "Mídia"

DEMO_AREAS = [
    # (nome, ordem, mínimo)
    ("Som", 1, 1),
    ("Projeção", 2, 1),
    ("Transmissão", 3, 0),
]

DEFAULT_NAMES = [
    "Ana", "Bruno", "Carla", "Davi", "Elisa",
    "Felipe", "Gabriela", "Hugo", "Isabela",
]

class Command(BaseCommand):
    help = "Dados de demonstração (admin + ministério + áreas + servos). Idempotente."

    def add_arguments(self, parser):
        parser.add_argument(
            "--names",
            type=str,
            help="Lista de nomes separada por vírgula. Ex.: 'Ana,Beto,Caio'. "
                 "Se omitido, usa uma lista padrão.",
        )
        parser.add_argument("--admin-user", type=str, default="admin", help="Username do superusuário demo.")
        parser.add_argument("--admin-email", type=str, default="admin@example.com", help="Email do superusuário demo.")
        parser.add_argument("--admin-pass", type=str, default="admin", help="Senha do superusuário demo.")

    def handle(self, *args, **kwargs):
        admin_user = kwargs["admin_user"]
        if not User.objects.filter(username=admin_user).exists():
            User.objects.create_superuser(admin_user, kwargs["admin_email"], kwargs["admin_pass"])
            self.stdout.write(self.style.SUCCESS(f"Created superuser {admin_user}"))
        else:
            self.stdout.write(self.style.WARNING(f"Superuser {admin_user} already exists."))

        ministry, _ = Ministry.objects.get_or_create(name=DEMO_MINISTRY, is_active=True)
        areas = []
        for name, order, minimum in DEMO_AREAS:
            area, _ = Area.objects.get_or_create(
                ministry=ministry,
                name=name,
                defaults={"order_index": order, "min_servants": minimum},
            )
            areas.append(area)

        names_arg = kwargs.get("names")
        names = [n.strip() for n in names_arg.split(",") if n.strip()] if names_arg else DEFAULT_NAMES

        created_count = 0
        for i, n in enumerate(names):
            area = areas[i % len(areas)]
            _, created = Servant.objects.get_or_create(
                name=n,
                area=area,
                defaults={"email": f"{n.lower()}@example.com", "is_active": True},
            )
            created_count += int(created)

        self.stdout.write(self.style.SUCCESS(
            f"Ministério '{ministry.name}' (id={ministry.id}): {len(areas)} área(s), "
            f"{created_count} servo(s) criado(s) de {len(names)}."
        ))
