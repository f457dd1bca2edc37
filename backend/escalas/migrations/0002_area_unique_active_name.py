from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("escalas", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="area",
            constraint=models.UniqueConstraint(
                condition=models.Q(("is_active", True)),
                fields=("ministry", "name"),
                name="uniq_active_area_name",
            ),
        ),
    ]
