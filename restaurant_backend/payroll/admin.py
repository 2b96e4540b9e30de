# payroll/admin.py

from django.contrib import admin

from payroll.models import PayrollTransaction


@admin.register(PayrollTransaction)
class PayrollTransactionAdmin(admin.ModelAdmin):
    list_display = ("reference", "employee", "final_amount", "status", "gl_status", "period_start", "period_end")
    list_filter = ("status", "gl_status")
    search_fields = ("reference", "employee__email")
    readonly_fields = (
        "final_amount",
        "reference",
        "gl_status",
        "journal_entry",
        "payment_journal_entry",
        "approved_by",
        "approved_at",
        "paid_at",
        "created_at",
        "updated_at",
    )
