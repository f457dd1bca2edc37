from rest_framework import serializers

from escalas.domain.models import (
    Area,
    Ministry,
    PeriodStatus,
    RegularEvent,
    ScheduleAssignment,
    ScheduleEvent,
    SchedulePeriod,
    Servant,
    ServantAvailability,
)
from escalas.utils import availability_url

# =========================
# Cadastros
# =========================

class MinistrySerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=100)

    class Meta:
        model = Ministry
        fields = ["id", "name", "description", "color", "is_active", "created_at", "updated_at"]
        read_only_fields = ("id", "is_active", "created_at", "updated_at")
        validators = []

class MinistryBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Ministry
        fields = ["id", "name", "color"]
        read_only_fields = fields

class AreaSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=100)
    ministry_id = serializers.PrimaryKeyRelatedField(
        source="ministry", queryset=Ministry.objects.filter(is_active=True)
    )

    class Meta:
        model = Area
        fields = [
            "id", "ministry_id", "name", "description", "is_active",
            "order_index", "min_servants", "max_servants",
        ]
        read_only_fields = ("id", "is_active")
        validators = []

    def validate(self, attrs):
        lo = attrs.get("min_servants", getattr(self.instance, "min_servants", 0))
        hi = attrs.get("max_servants", getattr(self.instance, "max_servants", None))
        if hi is not None and hi < lo:
            raise serializers.ValidationError({"max_servants": ["Deve ser maior ou igual ao mínimo"]})
        return attrs

class AreaBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Area
        fields = ["id", "name", "ministry_id"]
        read_only_fields = fields

class ServantSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=120)
    area_id = serializers.PrimaryKeyRelatedField(source="area", queryset=Area.objects.filter(is_active=True))
    area = AreaBriefSerializer(read_only=True)

    class Meta:
        model = Servant
        fields = ["id", "area_id", "area", "name", "email", "phone", "is_leader", "is_active", "notes"]
        read_only_fields = ("id", "area", "is_active")

class ServantPublicSerializer(serializers.ModelSerializer):
    """Servo como aparece no formulário público (sem contato)."""
    area = AreaBriefSerializer(read_only=True)

    class Meta:
        model = Servant
        fields = ["id", "name", "is_leader", "area"]
        read_only_fields = fields

class RegularEventSerializer(serializers.ModelSerializer):
    title = serializers.CharField(min_length=2, max_length=100)
    ministry_ids = serializers.PrimaryKeyRelatedField(
        source="ministries", many=True, queryset=Ministry.objects.filter(is_active=True)
    )

    class Meta:
        model = RegularEvent
        fields = ["id", "title", "day_of_week", "time", "week_of_month", "is_active", "notes", "ministry_ids"]
        read_only_fields = ("id", "is_active")

    def validate_ministry_ids(self, value):
        if not value:
            raise serializers.ValidationError("Selecione pelo menos um ministério")
        return value

# =========================
# Eventos e atribuições
# =========================

class AssignmentSerializer(serializers.ModelSerializer):
    servant = ServantPublicSerializer(read_only=True)
    area = AreaBriefSerializer(read_only=True)
    schedule_event_id = serializers.IntegerField(source="event_id", read_only=True)

    class Meta:
        model = ScheduleAssignment
        fields = ["id", "schedule_event_id", "servant", "area", "confirmed", "confirmed_at", "notes", "created_at"]
        read_only_fields = fields

class ScheduleEventSerializer(serializers.ModelSerializer):
    period_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = ScheduleEvent
        fields = [
            "id", "period_id", "event_date", "event_time", "event_type",
            "title", "description", "source", "external_id",
        ]
        read_only_fields = fields

class ScheduleEventDetailSerializer(ScheduleEventSerializer):
    assignments = AssignmentSerializer(many=True, read_only=True)

    class Meta(ScheduleEventSerializer.Meta):
        fields = ScheduleEventSerializer.Meta.fields + ["assignments"]
        read_only_fields = fields

class ScheduleEventCreateSerializer(serializers.Serializer):
    period_id = serializers.IntegerField()
    event_date = serializers.DateField()
    event_time = serializers.TimeField()
    title = serializers.CharField(min_length=2, max_length=120)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)

class AssignmentCreateSerializer(serializers.Serializer):
    schedule_event_id = serializers.IntegerField()
    servant_id = serializers.IntegerField()
    area_id = serializers.IntegerField()
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)

# =========================
# Períodos
# =========================

class SchedulePeriodSerializer(serializers.ModelSerializer):
    ministry = MinistryBriefSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = SchedulePeriod
        fields = [
            "id", "ministry", "month", "year", "status", "status_display",
            "start_date", "end_date", "availability_deadline", "notes",
            "published_at", "created_at", "updated_at",
        ]
        read_only_fields = fields

class SchedulePeriodDetailSerializer(SchedulePeriodSerializer):
    events = serializers.SerializerMethodField()
    availability_url = serializers.SerializerMethodField()

    class Meta(SchedulePeriodSerializer.Meta):
        fields = SchedulePeriodSerializer.Meta.fields + ["availability_token", "availability_url", "events"]
        read_only_fields = fields

    def get_events(self, obj):
        events = sorted(obj.events.all(), key=lambda e: (e.event_date, e.event_time, e.title))
        return ScheduleEventDetailSerializer(events, many=True).data

    def get_availability_url(self, obj):
        return availability_url(obj.availability_token)

class SchedulePeriodCreateSerializer(serializers.Serializer):
    ministry_id = serializers.IntegerField()
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2024)
    availability_deadline = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)

class SchedulePeriodUpdateSerializer(serializers.Serializer):
    availability_deadline = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=PeriodStatus.choices, required=False)

class ImportBookingsSerializer(serializers.Serializer):
    booking_ids = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=False,
        error_messages={"empty": "Nenhum agendamento selecionado"},
    )

# =========================
# Disponibilidade
# =========================

class PublicPeriodSerializer(serializers.ModelSerializer):
    ministry = MinistryBriefSerializer(read_only=True)

    class Meta:
        model = SchedulePeriod
        fields = ["id", "month", "year", "availability_deadline", "ministry"]
        read_only_fields = fields

class AvailabilityEntrySerializer(serializers.Serializer):
    event_id = serializers.IntegerField()
    is_available = serializers.BooleanField()
    notes = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)

class AvailabilitySubmitSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=64)
    servant_id = serializers.IntegerField()
    period_id = serializers.IntegerField(required=False, allow_null=True)
    availabilities = AvailabilityEntrySerializer(many=True)

class AvailabilityResponseSerializer(serializers.ModelSerializer):
    servant = ServantPublicSerializer(read_only=True)

    class Meta:
        model = ServantAvailability
        fields = ["id", "servant_id", "event_id", "is_available", "notes", "submitted_at", "servant"]
        read_only_fields = fields
