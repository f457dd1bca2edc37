from __future__ import annotations

from django.db.models.signals import post_delete, post_save, pre_save

from escalas.services.audit import audit, snapshot_instance
from .models import ScheduleAssignment, ScheduleEvent, SchedulePeriod

# Inserções em lote (geração, importação, disponibilidade) não disparam
# signals; os serviços registram uma linha de auditoria resumida no período.
AUDITED_MODELS = (SchedulePeriod, ScheduleEvent, ScheduleAssignment)

def _pre_save(sender, instance, **kwargs):
    """Guarda o snapshot anterior para o registro de auditoria."""
    instance._before_snapshot = None
    if not instance.pk:
        return
    old = sender.objects.filter(pk=instance.pk).first()
    if old is not None:
        instance._before_snapshot = snapshot_instance(old)

def _post_save(sender, instance, created: bool, **kwargs):
    action = "create" if created else "update"
    audit(action, instance, before=getattr(instance, "_before_snapshot", None), after=snapshot_instance(instance))

def _post_delete(sender, instance, **kwargs):
    audit("delete", instance, before=snapshot_instance(instance), after=None)

for _model in AUDITED_MODELS:
    uid = f"escalas_audit_{_model._meta.model_name}"
    pre_save.connect(_pre_save, sender=_model, dispatch_uid=f"{uid}_pre")
    post_save.connect(_post_save, sender=_model, dispatch_uid=f"{uid}_post")
    post_delete.connect(_post_delete, sender=_model, dispatch_uid=f"{uid}_del")
