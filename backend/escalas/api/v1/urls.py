from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    AreaViewSet,
    MinistryViewSet,
    RegularEventViewSet,
    SchedulePeriodViewSet,
    ServantViewSet,
    assignment_confirm,
    assignments,
    availability_form,
    availability_submit,
    export_ics,
    export_xlsx,
    schedule_event_detail,
    schedule_events,
)

router = DefaultRouter()
router.register("ministries", MinistryViewSet, basename="ministry")
router.register("areas", AreaViewSet, basename="area")
router.register("servants", ServantViewSet, basename="servant")
router.register("regular-events", RegularEventViewSet, basename="regular-event")
router.register("schedule-periods", SchedulePeriodViewSet, basename="schedule-period")

urlpatterns = [
    path("schedule-periods/<int:pk>/export.xlsx", export_xlsx, name="api_export_xlsx"),
    path("schedule-periods/<int:pk>/export.ics", export_ics, name="api_export_ics"),
    path("schedule-events/", schedule_events, name="api_schedule_events"),
    path("schedule-events/<int:pk>/", schedule_event_detail, name="api_schedule_event_detail"),
    path("availability/", availability_submit, name="api_availability_submit"),
    path("availability/<str:token>/", availability_form, name="api_availability_form"),
    path("assignments/", assignments, name="api_assignments"),
    path("assignments/<int:pk>/confirm/", assignment_confirm, name="api_assignment_confirm"),
] + router.urls
