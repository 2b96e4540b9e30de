# scheduling/admin.py

from django.contrib import admin

from scheduling.models import Shift, TimeEntry


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ("user", "branch", "date", "start_time", "end_time", "role", "status")
    list_filter = ("status", "branch", "date")
    search_fields = ("user__email", "user__username", "role")
    date_hierarchy = "date"


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = ("user", "branch", "clock_in_at", "clock_out_at", "total_hours")
    list_filter = ("branch", "clock_in_source")
    search_fields = ("user__email", "user__username")
    date_hierarchy = "clock_in_at"
