from django.urls import path

from .views import payroll_summary

urlpatterns = [
    path("summary/", payroll_summary, name="payroll-summary"),
]
