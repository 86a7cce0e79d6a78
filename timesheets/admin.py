from django.contrib import admin

from .models import CostAccrual, TimesheetEntry


@admin.register(TimesheetEntry)
class TimesheetEntryAdmin(admin.ModelAdmin):
    list_display = (
        "employee",
        "date",
        "status",
        "normal_hours",
        "evening_hours",
        "night_hours",
        "total_hours",
        "overtime_pay",
    )
    list_filter = ("status", "company_id", "date")
    search_fields = ("employee__first_name", "employee__last_name", "employee__employee_code")
    date_hierarchy = "date"
    # Hours, pay and status only change through the ledger
    readonly_fields = [field.name for field in TimesheetEntry._meta.fields]

    def has_add_permission(self, request):
        return False


@admin.register(CostAccrual)
class CostAccrualAdmin(admin.ModelAdmin):
    list_display = ("entry", "project_id", "amount", "status", "attempts", "applied_at")
    list_filter = ("status",)
    readonly_fields = [field.name for field in CostAccrual._meta.fields]

    def has_add_permission(self, request):
        return False
