from rest_framework import serializers


class PayrollSummaryQuerySerializer(serializers.Serializer):
    employee_id = serializers.IntegerField(required=False, min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError(
                {"end_date": "Period end must not be before period start"}
            )
        return attrs


class PayrollPeriodSummarySerializer(serializers.Serializer):
    employee_id = serializers.IntegerField()
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    entry_count = serializers.IntegerField()
    normal_hours = serializers.DecimalField(max_digits=10, decimal_places=2)
    evening_hours = serializers.DecimalField(max_digits=10, decimal_places=2)
    night_hours = serializers.DecimalField(max_digits=10, decimal_places=2)
    total_hours = serializers.DecimalField(max_digits=10, decimal_places=2)
    normal_pay = serializers.DecimalField(max_digits=14, decimal_places=2)
    evening_pay = serializers.DecimalField(max_digits=14, decimal_places=2)
    night_pay = serializers.DecimalField(max_digits=14, decimal_places=2)
    overtime_pay = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_payable = serializers.DecimalField(max_digits=14, decimal_places=2)
