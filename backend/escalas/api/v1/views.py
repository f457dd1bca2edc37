import logging
import os
import tempfile

from django.db import IntegrityError, transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, DjangoModelPermissions, IsAuthenticated
from rest_framework.response import Response

from escalas.domain.models import (
    Area,
    Ministry,
    RegularEvent,
    ScheduleEvent,
    SchedulePeriod,
    Servant,
)
from escalas.domain.repositories import PeriodRepository
from escalas.services import assignments as assignment_service
from escalas.services import availability as availability_service
from escalas.services import calendar as calendar_service
from escalas.services import periods as period_service
from escalas.services.errors import AlreadyExists, NotFound, ValidationFailed
from escalas.services.exporters.export_ics import export_period_ics
from escalas.services.exporters.export_xlsx import export_period_xlsx, period_filename
from escalas.utils import availability_url

from .filters import AreaFilter, RegularEventFilter, SchedulePeriodFilter, ServantFilter
from .permissions import CanManageAssignments, CanManageEvents, CanManagePeriods
from .serializers import (
    AreaSerializer,
    AssignmentCreateSerializer,
    AssignmentSerializer,
    AvailabilityResponseSerializer,
    AvailabilitySubmitSerializer,
    ImportBookingsSerializer,
    MinistrySerializer,
    PublicPeriodSerializer,
    RegularEventSerializer,
    ScheduleEventCreateSerializer,
    ScheduleEventSerializer,
    SchedulePeriodCreateSerializer,
    SchedulePeriodDetailSerializer,
    SchedulePeriodSerializer,
    SchedulePeriodUpdateSerializer,
    ServantPublicSerializer,
    ServantSerializer,
)

log = logging.getLogger(__name__)

# =========================
# Cadastros (exclusão lógica)
# =========================

class SoftDeleteModelViewSet(viewsets.ModelViewSet):
    """CRUD com listagem apenas dos ativos e exclusão lógica (``is_active=False``)."""
    permission_classes = [DjangoModelPermissions]
    lookup_value_regex = r"\d+"
    duplicate_message = "Registro já existe"

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action == "list":
            return qs.filter(is_active=True)
        return qs

    def _save(self, serializer):
        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError:
            raise AlreadyExists(self.duplicate_message)

    def perform_create(self, serializer):
        self._save(serializer)

    def perform_update(self, serializer):
        self._save(serializer)

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])

class MinistryViewSet(SoftDeleteModelViewSet):
    queryset = Ministry.objects.all().order_by("name")
    serializer_class = MinistrySerializer
    duplicate_message = "Já existe um ministério com este nome"

class AreaViewSet(SoftDeleteModelViewSet):
    queryset = Area.objects.select_related("ministry").order_by("ministry__name", "order_index", "name")
    serializer_class = AreaSerializer
    filterset_class = AreaFilter
    duplicate_message = "Já existe uma área com este nome neste ministério"

class ServantViewSet(SoftDeleteModelViewSet):
    queryset = Servant.objects.select_related("area").order_by("name")
    serializer_class = ServantSerializer
    filterset_class = ServantFilter

class RegularEventViewSet(SoftDeleteModelViewSet):
    queryset = RegularEvent.objects.prefetch_related("ministries").order_by("day_of_week", "time")
    serializer_class = RegularEventSerializer
    filterset_class = RegularEventFilter

# =========================
# Períodos
# =========================

class SchedulePeriodViewSet(viewsets.ModelViewSet):
    permission_classes = [CanManagePeriods]
    lookup_value_regex = r"\d+"
    filterset_class = SchedulePeriodFilter
    queryset = SchedulePeriod.objects.select_related("ministry").order_by("-year", "-month")

    def get_queryset(self):
        if self.action == "retrieve":
            return PeriodRepository.with_detail()
        return super().get_queryset()

    def get_serializer_class(self):
        if self.action == "retrieve":
            return SchedulePeriodDetailSerializer
        return SchedulePeriodSerializer

    def get_object(self):
        obj = self.get_queryset().filter(pk=self.kwargs["pk"]).first()
        if obj is None:
            raise NotFound(period_service.PERIOD_NOT_FOUND)
        self.check_object_permissions(self.request, obj)
        return obj

    def retrieve(self, request, *args, **kwargs):
        period = self.get_object()
        data = SchedulePeriodDetailSerializer(period).data
        data["coverage"] = assignment_service.area_coverage(period)
        return Response(data)

    def create(self, request, *args, **kwargs):
        s = SchedulePeriodCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)
        ministry = Ministry.objects.filter(id=data.pop("ministry_id"), is_active=True).first()
        if ministry is None:
            raise ValidationFailed("Ministério inválido", errors={"ministry_id": ["Ministério inexistente ou inativo"]})
        period = period_service.create_period(ministry, created_by=request.user, **data)
        return Response(SchedulePeriodSerializer(period).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        s = SchedulePeriodUpdateSerializer(data=request.data, partial=kwargs.get("partial", False))
        s.is_valid(raise_exception=True)
        period = period_service.update_period(int(kwargs["pk"]), **s.validated_data)
        return Response(SchedulePeriodSerializer(period).data)

    def destroy(self, request, *args, **kwargs):
        period_service.delete_period(int(kwargs["pk"]))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="generate-events")
    def generate_events(self, request, pk=None):
        period = self.get_object()
        created = calendar_service.generate_regular_events_for_period(period)
        return Response({
            "created": created,
            "message": f"{created} evento(s) gerado(s) a partir do calendário regular",
        })

    @action(detail=True, methods=["get", "post"], url_path="import-bookings")
    def import_bookings(self, request, pk=None):
        period = self.get_object()
        if request.method == "GET":
            return Response(calendar_service.bookings_for_period(period))
        s = ImportBookingsSerializer(data=request.data)
        if not s.is_valid():
            raise ValidationFailed("Nenhum agendamento selecionado", errors=s.errors)
        imported = calendar_service.import_bookings_to_period(period, s.validated_data["booking_ids"])
        return Response({
            "imported": imported,
            "message": f"{imported} evento(s) importado(s) do sistema de agendamentos",
        })

    @action(detail=True, methods=["post"])
    def publish(self, request, pk=None):
        period = period_service.publish_period(int(pk))
        return Response({
            "period": SchedulePeriodSerializer(period).data,
            "message": "Escala publicada com sucesso!",
        })

    @action(detail=True, methods=["post"], url_path="rotate-token")
    def rotate_token(self, request, pk=None):
        period = period_service.rotate_token(int(pk))
        return Response({
            "availability_token": period.availability_token,
            "availability_url": availability_url(period.availability_token),
        })

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        period = self.get_object()
        qs = availability_service.period_responses(period)
        return Response(AvailabilityResponseSerializer(qs, many=True).data)

@api_view(["GET"])
@permission_classes([IsAuthenticated])
def export_xlsx(request, pk: int):
    period = get_object_or_404(SchedulePeriod.objects.select_related("ministry"), pk=pk)
    filename = period_filename(period, "xlsx")
    with tempfile.TemporaryDirectory() as td:
        path = os.path.join(td, filename)
        export_period_xlsx(period, path)
        with open(path, "rb") as f:
            content = f.read()
    resp = HttpResponse(content, content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp

@api_view(["GET"])
@permission_classes([IsAuthenticated])
def export_ics(request, pk: int):
    period = get_object_or_404(SchedulePeriod.objects.select_related("ministry"), pk=pk)
    resp = HttpResponse(export_period_ics(period), content_type="text/calendar")
    resp["Content-Disposition"] = f'attachment; filename="{period_filename(period, "ics")}"'
    return resp

# =========================
# Eventos
# =========================

@api_view(["POST"])
@permission_classes([CanManageEvents])
def schedule_events(request):
    s = ScheduleEventCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    period = SchedulePeriod.objects.filter(id=data.pop("period_id")).first()
    if period is None:
        raise NotFound(period_service.PERIOD_NOT_FOUND)
    event = calendar_service.create_manual_event(period, **data)
    return Response(ScheduleEventSerializer(event).data, status=status.HTTP_201_CREATED)

@api_view(["DELETE"])
@permission_classes([CanManageEvents])
def schedule_event_detail(request, pk: int):
    event = ScheduleEvent.objects.select_related("period").filter(id=pk).first()
    if event is None:
        raise NotFound("Evento não encontrado")
    calendar_service.delete_event(event)
    return Response(status=status.HTTP_204_NO_CONTENT)

# =========================
# Disponibilidade (pública)
# =========================

@api_view(["GET"])
@permission_classes([AllowAny])
def availability_form(request, token: str):
    period = availability_service.open_period_for_token(token)
    data = availability_service.availability_form_data(period)
    return Response({
        "period": PublicPeriodSerializer(data["period"]).data,
        "events": ScheduleEventSerializer(data["events"], many=True).data,
        "servants": ServantPublicSerializer(data["servants"], many=True).data,
    })

@api_view(["POST"])
@permission_classes([AllowAny])
def availability_submit(request):
    s = AvailabilitySubmitSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    count = availability_service.submit_availability(
        data["token"],
        data["servant_id"],
        data["availabilities"],
        period_id=data.get("period_id"),
    )
    return Response({"count": count, "message": "Disponibilidade registrada com sucesso!"})

# =========================
# Atribuições
# =========================

def _int_param(request, name):
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationFailed(f"Parâmetro '{name}' deve ser inteiro", errors={name: ["Valor inválido"]})

@api_view(["GET", "POST", "DELETE"])
@permission_classes([CanManageAssignments])
def assignments(request):
    if request.method == "GET":
        qs = assignment_service.list_assignments(
            period_id=_int_param(request, "period_id"),
            event_id=_int_param(request, "event_id"),
        )
        return Response(AssignmentSerializer(qs, many=True).data)

    if request.method == "DELETE":
        assignment_service.unassign(
            assignment_id=_int_param(request, "id"),
            event_id=_int_param(request, "event_id"),
            area_id=_int_param(request, "area_id"),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    s = AssignmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    assignment = assignment_service.assign(
        data["schedule_event_id"],
        data["servant_id"],
        data["area_id"],
        notes=data.get("notes"),
        actor=request.user,
    )
    return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

@api_view(["POST"])
@permission_classes([CanManageAssignments])
def assignment_confirm(request, pk: int):
    assignment = assignment_service.confirm(pk)
    return Response(AssignmentSerializer(assignment).data)
