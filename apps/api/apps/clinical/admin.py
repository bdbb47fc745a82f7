from django.contrib import admin
from .models import Patient, Appointment, TreatmentPlan, TreatmentVisit


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'email', 'phone', 'is_deleted', 'created_at']
    list_filter = ['sex', 'is_deleted']
    search_fields = ['first_name', 'last_name', 'email', 'phone']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'first_name', 'last_name', 'birth_date', 'sex')
        }),
        ('Contact', {
            'fields': ('email', 'phone', 'address_line1', 'city', 'postal_code')
        }),
        ('Medical', {
            'fields': ('medical_history', 'allergies', 'notes')
        }),
        ('Soft Delete', {
            'fields': ('is_deleted', 'deleted_at')
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at')
        }),
    )


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['start_time', 'end_time', 'patient', 'practitioner', 'type', 'status', 'is_deleted']
    list_filter = ['type', 'status', 'is_deleted']
    search_fields = ['patient__first_name', 'patient__last_name', 'title']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['patient', 'practitioner']
    raw_id_fields = ['treatment_visit']
    date_hierarchy = 'start_time'


class TreatmentVisitInline(admin.TabularInline):
    model = TreatmentVisit
    extra = 0
    fields = ['visit_number', 'procedures', 'estimated_duration', 'time_gap', 'scheduled_date', 'status', 'completed_date']
    ordering = ['visit_number']


@admin.register(TreatmentPlan)
class TreatmentPlanAdmin(admin.ModelAdmin):
    list_display = ['title', 'patient', 'start_date', 'status', 'priority', 'ai_generated', 'is_deleted']
    list_filter = ['status', 'priority', 'ai_generated', 'is_deleted']
    search_fields = ['title', 'patient__first_name', 'patient__last_name']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
    autocomplete_fields = ['patient']
    inlines = [TreatmentVisitInline]
