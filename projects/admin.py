from django.contrib import admin

from .models import Project, ProjectAssignment


class ProjectAssignmentInline(admin.TabularInline):
    model = ProjectAssignment
    extra = 0


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("name", "company_id", "status", "estimated_cost", "actual_cost")
    list_filter = ("company_id", "status", "is_active")
    search_fields = ("name", "client_name")
    # actual_cost only moves through approved timesheets
    readonly_fields = ("actual_cost", "created_at", "updated_at")
    inlines = [ProjectAssignmentInline]
