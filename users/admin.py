from django.contrib import admin

from .models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = (
        "employee_code",
        "first_name",
        "last_name",
        "company_id",
        "role",
        "hourly_rate",
        "is_active",
    )
    list_filter = ("company_id", "role", "is_active")
    search_fields = ("employee_code", "first_name", "last_name")
    readonly_fields = ("created_at", "updated_at")
