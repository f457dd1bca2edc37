from __future__ import annotations

from uuid import uuid4

from django.contrib.auth.models import User
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.db import models
from django.db.models import Q

# =========================
# Choices canônicos
# =========================

class PeriodStatus(models.TextChoices):
    DRAFT = "draft", "Rascunho"
    COLLECTING = "collecting", "Coletando Disponibilidade"
    SCHEDULING = "scheduling", "Montando Escala"
    PUBLISHED = "published", "Publicada"
    CLOSED = "closed", "Encerrada"

class EventType(models.TextChoices):
    REGULAR = "regular", "Regular"
    SPECIAL = "special", "Especial"
    IMPORTED = "imported", "Importado"

class EventSource(models.TextChoices):
    MANUAL = "manual", "Manual"
    REGULAR_CALENDAR = "regular_calendar", "Calendário Regular"
    BOOKING_SYSTEM = "booking_system", "Sistema de Agendamentos"

class BookingStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    APPROVED = "approved", "Aprovado"
    REJECTED = "rejected", "Rejeitado"
    CANCELLED = "cancelled", "Cancelado"

DAY_OF_WEEK_LABELS = {
    0: "Domingo",
    1: "Segunda-feira",
    2: "Terça-feira",
    3: "Quarta-feira",
    4: "Quinta-feira",
    5: "Sexta-feira",
    6: "Sábado",
}

HEX_COLOR = RegexValidator(r"^#[0-9A-Fa-f]{6}$", "Cor inválida")

def new_availability_token() -> str:
    return uuid4().hex

# =========================
# Ministérios, áreas e servos
# =========================

class Ministry(models.Model):
    """Unidade organizacional (ex.: Louvor, Mídia) dona das áreas de serviço."""
    name = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True, null=True)
    color = models.CharField(max_length=7, default="#3b82f6", validators=[HEX_COLOR])
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Ministério"
        verbose_name_plural = "Ministérios"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=("name",), condition=Q(is_active=True), name="uniq_active_ministry_name"
            ),
        ]

    def __str__(self):
        return self.name

class Area(models.Model):
    """Função dentro de um ministério (ex.: Som, Projeção)."""
    ministry = models.ForeignKey(Ministry, on_delete=models.CASCADE, related_name="areas")
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True, db_index=True)
    order_index = models.PositiveIntegerField(default=0)
    min_servants = models.PositiveIntegerField(default=0)
    max_servants = models.PositiveIntegerField(blank=True, null=True, validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Área"
        verbose_name_plural = "Áreas"
        ordering = ["ministry", "order_index", "name"]
        indexes = [
            models.Index(fields=["ministry", "is_active"], name="area_ministry_active_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=("ministry", "name"), condition=Q(is_active=True), name="uniq_active_area_name"
            ),
        ]

    def __str__(self):
        return f"{self.ministry} / {self.name}"

class Servant(models.Model):
    """Voluntário vinculado a exatamente uma área."""
    area = models.ForeignKey(Area, on_delete=models.CASCADE, related_name="servants")
    user = models.ForeignKey(User, blank=True, null=True, on_delete=models.SET_NULL)
    name = models.CharField(max_length=120, db_index=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=30, blank=True, null=True)
    is_active = models.BooleanField(default=True, db_index=True)
    is_leader = models.BooleanField(default=False)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Servo"
        verbose_name_plural = "Servos"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["area", "is_active"], name="servant_area_active_idx"),
        ]

    def __str__(self):
        return self.name

# =========================
# Calendário regular
# =========================

class RegularEvent(models.Model):
    """Modelo de evento recorrente (não é uma ocorrência datada)."""
    ministries = models.ManyToManyField(Ministry, related_name="regular_events", blank=True)
    title = models.CharField(max_length=100)
    day_of_week = models.IntegerField(
        help_text="0=Domingo ... 6=Sábado",
        validators=[MinValueValidator(0), MaxValueValidator(6)],
        db_index=True,
    )
    time = models.TimeField()
    week_of_month = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        help_text="N-ésima ocorrência do dia da semana no mês (1-5). Vazio = todas.",
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    is_active = models.BooleanField(default=True, db_index=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Evento Regular"
        verbose_name_plural = "Eventos Regulares"
        ordering = ["day_of_week", "time"]

    def __str__(self):
        return f"{DAY_OF_WEEK_LABELS.get(self.day_of_week, self.day_of_week)} {self.time:%H:%M} {self.title}"

# =========================
# Períodos de escala
# =========================

class SchedulePeriod(models.Model):
    """Escala de um ministério para um mês do calendário."""
    ministry = models.ForeignKey(Ministry, on_delete=models.CASCADE, related_name="periods")
    month = models.PositiveIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)], db_index=True)
    year = models.PositiveIntegerField(validators=[MinValueValidator(2024)], db_index=True)
    status = models.CharField(
        max_length=12, choices=PeriodStatus.choices, default=PeriodStatus.DRAFT, db_index=True
    )
    start_date = models.DateField()
    end_date = models.DateField()
    availability_deadline = models.DateTimeField(blank=True, null=True)
    availability_token = models.CharField(max_length=64, unique=True, default=new_availability_token, editable=False)
    notes = models.TextField(blank=True, null=True)
    published_at = models.DateTimeField(blank=True, null=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Período de Escala"
        verbose_name_plural = "Períodos de Escala"
        ordering = ["-year", "-month"]
        constraints = [
            models.UniqueConstraint(fields=("ministry", "month", "year"), name="uniq_period_ministry_month"),
        ]
        indexes = [
            models.Index(fields=["year", "month"], name="period_year_month_idx"),
        ]

    def __str__(self):
        return f"{self.ministry} {self.year}-{self.month:02d}"

class ScheduleEvent(models.Model):
    """Ocorrência datada dentro de um período."""
    period = models.ForeignKey(SchedulePeriod, on_delete=models.CASCADE, related_name="events")
    event_date = models.DateField(db_index=True)
    event_time = models.TimeField()
    event_type = models.CharField(max_length=10, choices=EventType.choices, default=EventType.REGULAR)
    title = models.CharField(max_length=120)
    description = models.TextField(blank=True, null=True)
    source = models.CharField(max_length=20, choices=EventSource.choices, default=EventSource.MANUAL)
    external_id = models.CharField(max_length=64, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Evento da Escala"
        verbose_name_plural = "Eventos da Escala"
        ordering = ["event_date", "event_time"]
        constraints = [
            models.UniqueConstraint(
                fields=("period", "event_date", "event_time", "title"), name="uniq_event_period_slot"
            ),
            models.UniqueConstraint(
                fields=("period", "external_id"),
                condition=Q(external_id__isnull=False),
                name="uniq_event_period_external",
            ),
        ]
        indexes = [
            models.Index(fields=["period", "event_date"], name="event_period_date_idx"),
        ]

    def __str__(self):
        return f"{self.event_date} {self.event_time:%H:%M} {self.title}"

class ServantAvailability(models.Model):
    """Resposta sim/não de um servo para um evento do período."""
    servant = models.ForeignKey(Servant, on_delete=models.CASCADE, related_name="availabilities")
    period = models.ForeignKey(SchedulePeriod, on_delete=models.CASCADE, related_name="availabilities")
    event = models.ForeignKey(
        ScheduleEvent, on_delete=models.CASCADE, related_name="availabilities", blank=True, null=True
    )
    is_available = models.BooleanField(default=True)
    notes = models.CharField(max_length=200, blank=True, null=True)
    submitted_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Disponibilidade"
        verbose_name_plural = "Disponibilidades"
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(fields=("servant", "event"), name="uniq_availability_servant_event"),
        ]
        indexes = [
            models.Index(fields=["period", "servant"], name="availability_period_srv_idx"),
        ]

    def __str__(self):
        flag = "sim" if self.is_available else "não"
        return f"{self.servant} -> {self.event_id} ({flag})"

class ScheduleAssignment(models.Model):
    """Vincula um servo a uma área em um evento."""
    event = models.ForeignKey(ScheduleEvent, on_delete=models.CASCADE, related_name="assignments")
    servant = models.ForeignKey(Servant, on_delete=models.CASCADE, related_name="assignments")
    area = models.ForeignKey(Area, on_delete=models.CASCADE, related_name="assignments")
    confirmed = models.BooleanField(default=False)
    confirmed_at = models.DateTimeField(blank=True, null=True)
    notes = models.CharField(max_length=500, blank=True, null=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Atribuição"
        verbose_name_plural = "Atribuições"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=("event", "area"), name="uniq_assignment_event_area"),
            models.UniqueConstraint(fields=("event", "servant"), name="uniq_assignment_event_servant"),
        ]

    def __str__(self):
        return f"{self.event} -> {self.servant} ({self.area.name})"

# =========================
# Sistema de agendamentos (origem da importação)
# =========================

class Environment(models.Model):
    """Ambiente reservável da igreja (salão, sala...)."""
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Ambiente"
        verbose_name_plural = "Ambientes"
        ordering = ["name"]

    def __str__(self):
        return self.name

class Booking(models.Model):
    """Reserva de ambiente; somente as aprovadas podem virar eventos da escala."""
    environment = models.ForeignKey(Environment, on_delete=models.CASCADE, related_name="bookings")
    name = models.CharField(max_length=120)
    booking_date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    occasion = models.CharField(max_length=200, blank=True, null=True)
    responsible_person = models.CharField(max_length=120, blank=True, null=True)
    status = models.CharField(
        max_length=10, choices=BookingStatus.choices, default=BookingStatus.PENDING, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Reserva"
        verbose_name_plural = "Reservas"
        ordering = ["booking_date", "start_time"]

    def __str__(self):
        return f"{self.booking_date} {self.start_time:%H:%M} {self.occasion or self.name}"

# =========================
# Auditoria
# =========================

class AuditLog(models.Model):
    """Registra ações de criação, atualização e exclusão em outros modelos."""
    action = models.CharField(max_length=50, db_index=True)
    table = models.CharField(max_length=50, db_index=True)
    record_id = models.CharField(max_length=50)
    before = models.JSONField(blank=True, null=True, encoder=DjangoJSONEncoder)
    after = models.JSONField(blank=True, null=True, encoder=DjangoJSONEncoder)
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    ip_address = models.GenericIPAddressField(blank=True, null=True)

    class Meta:
        verbose_name = "Auditoria"
        verbose_name_plural = "Auditorias"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["table", "created_at"], name="audit_table_created_idx"),
            models.Index(fields=["action", "created_at"], name="audit_action_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.created_at:%Y-%m-%d %H:%M:%S} | {self.table}:{self.record_id} | {self.action}"
