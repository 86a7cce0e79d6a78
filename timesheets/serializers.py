from rest_framework import serializers

from .models import TimesheetEntry


class TimesheetEntrySerializer(serializers.ModelSerializer):
    """Read model of a ledger entry; hours and pay are derived, never written"""

    employee_name = serializers.ReadOnlyField(source="employee.get_full_name")
    normal_pay = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    labor_cost = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = TimesheetEntry
        fields = [
            "id",
            "employee",
            "employee_name",
            "company_id",
            "date",
            "clock_in",
            "clock_out",
            "break_minutes",
            "normal_hours",
            "evening_hours",
            "night_hours",
            "total_hours",
            "hourly_rate",
            "normal_pay",
            "evening_pay",
            "night_pay",
            "overtime_pay",
            "labor_cost",
            "status",
            "version",
            "project_assignment",
            "approved_at",
            "rejected_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TimesheetSubmitSerializer(serializers.Serializer):
    """Raw clock events of one work day"""

    employee_id = serializers.IntegerField(required=False, min_value=1)
    date = serializers.DateField()
    clock_in = serializers.DateTimeField()
    clock_out = serializers.DateTimeField(required=False, allow_null=True)
    break_minutes = serializers.IntegerField(required=False, default=0, min_value=0)
    assignment_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
