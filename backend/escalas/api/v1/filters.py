import django_filters

from escalas.domain.models import Area, PeriodStatus, RegularEvent, SchedulePeriod, Servant


class SchedulePeriodFilter(django_filters.FilterSet):
    ministry_id = django_filters.NumberFilter(field_name="ministry_id")
    status = django_filters.ChoiceFilter(choices=PeriodStatus.choices)

    class Meta:
        model = SchedulePeriod
        fields = ["ministry_id", "status", "year", "month"]


class AreaFilter(django_filters.FilterSet):
    ministry_id = django_filters.NumberFilter(field_name="ministry_id")

    class Meta:
        model = Area
        fields = ["ministry_id"]


class ServantFilter(django_filters.FilterSet):
    area_id = django_filters.NumberFilter(field_name="area_id")
    ministry_id = django_filters.NumberFilter(field_name="area__ministry_id")

    class Meta:
        model = Servant
        fields = ["area_id", "ministry_id", "is_leader"]


class RegularEventFilter(django_filters.FilterSet):
    ministry_id = django_filters.NumberFilter(field_name="ministries", distinct=True)

    class Meta:
        model = RegularEvent
        fields = ["ministry_id", "day_of_week"]
