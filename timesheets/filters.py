import django_filters

from .enums import TimesheetStatus
from .models import TimesheetEntry


class TimesheetEntryFilter(django_filters.FilterSet):
    employee = django_filters.NumberFilter(field_name="employee__id")
    status = django_filters.ChoiceFilter(choices=TimesheetStatus.choices())
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = TimesheetEntry
        fields = ["employee", "status", "start_date", "end_date"]
