"""
Django admin registrations for the clinic models.

Gives superusers a quick way to inspect and correct data under
``/admin/``.  Records show their medications, vitals and vaccinations
inline.
"""

from django.contrib import admin

from .models import (
    User,
    PatientProfile,
    Appointment,
    MedicalRecord,
    Medication,
    VitalSigns,
    Vaccination,
    Medicine,
    SiteSetting,
    Logo,
    AuditEvent,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'department', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'email', 'first_name', 'last_name', 'staff_id')


@admin.register(PatientProfile)
class PatientProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'student_id', 'gender', 'date_of_birth')
    search_fields = ('user__username', 'user__email', 'student_id')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('date', 'start_time', 'end_time', 'patient', 'doctor', 'status')
    list_filter = ('status', 'date')
    search_fields = ('patient__username', 'doctor__username', 'reason')


class MedicationInline(admin.TabularInline):
    model = Medication
    extra = 0


class VitalSignsInline(admin.StackedInline):
    model = VitalSigns
    extra = 0


class VaccinationInline(admin.TabularInline):
    model = Vaccination
    extra = 0


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('date', 'patient', 'doctor', 'bmi', 'certificate_enabled')
    list_filter = ('certificate_enabled', 'record_type')
    search_fields = ('patient__username', 'diagnosis')
    inlines = [MedicationInline, VitalSignsInline, VaccinationInline]


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'quantity', 'threshold', 'unit', 'expiry_date')
    list_filter = ('category',)
    search_fields = ('name', 'supplier')


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ('type', 'updated_at')


@admin.register(Logo)
class LogoAdmin(admin.ModelAdmin):
    list_display = ('position', 'file', 'content_type', 'size', 'updated_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'user', 'object_type', 'object_id')
    list_filter = ('action',)
    search_fields = ('object_id', 'user__username')
