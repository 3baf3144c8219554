from django.contrib import admin

from workshops.models import MemberProfile, Refund, Registration, Workshop


class RegistrationInline(admin.TabularInline):
    model = Registration
    extra = 0
    fields = ["member", "status", "priority", "amount_paid", "attendance_status"]
    raw_id_fields = ["member"]


@admin.register(Workshop)
class WorkshopAdmin(admin.ModelAdmin):
    list_display = ["title", "location", "start_date", "capacity", "status"]
    list_filter = ["status", "is_public"]
    search_fields = ["title", "location"]
    inlines = [RegistrationInline]


@admin.register(MemberProfile)
class MemberProfileAdmin(admin.ModelAdmin):
    list_display = ["last_name", "first_name", "email"]
    search_fields = ["last_name", "first_name", "email"]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["member", "workshop", "status", "priority", "amount_paid"]
    list_filter = ["status", "workshop"]


@admin.register(Refund)
class RefundAdmin(admin.ModelAdmin):
    list_display = ["registration", "amount", "status", "requested_at"]
    list_filter = ["status"]
    readonly_fields = ["stripe_refund_id", "requested_at", "processed_at", "completed_at"]
