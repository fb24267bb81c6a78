"""
URL mappings for the clinic API.

Paths carry no trailing slash, matching the front-end's endpoint table
(``APPEND_SLASH`` is off).  Every route is named so tests and the admin
can ``reverse()`` it.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, register_view
from .views import (
    appointments, certificates, dashboard, email, health, health_metrics, logos, medicines, records,
    settings, users,
)

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),
    path('api/health', health.api_health, name='api_health'),
    path('', include('django_prometheus.urls')),

    # auth
    path('api/auth/register', register_view, name='register_view'),
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),

    # users
    path('api/users', users.users, name='users'),
    path('api/users/role/<str:role>', users.users_by_role, name='users_by_role'),
    path('api/users/<int:user_id>', users.user_detail, name='user_detail'),
    path('api/user/profile', users.current_profile, name='current_profile'),

    # medical records
    path('api/medical-records', records.medical_records, name='medical_records'),
    path('api/medical-records/patient/<int:patient_id>', records.patient_records, name='patient_records'),
    path('api/medical-records/<uuid:record_id>', records.medical_record_detail, name='medical_record_detail'),

    # health metrics & certificates
    path('api/health-metrics/bmi', health_metrics.bmi_calculator, name='bmi_calculator'),
    path('api/health-metrics/patient/<int:patient_id>', health_metrics.patient_health_metrics,
         name='patient_health_metrics'),
    path('api/certificates/bmi/<uuid:record_id>', certificates.bmi_certificate, name='bmi_certificate'),

    # appointments
    path('api/appointments', appointments.appointments, name='appointments'),
    path('api/appointments/slots', appointments.available_slots, name='appointment_slots'),
    path('api/appointments/patient/<int:patient_id>', appointments.patient_appointments,
         name='patient_appointments'),
    path('api/appointments/doctor/<int:doctor_id>', appointments.doctor_appointments, name='doctor_appointments'),
    path('api/appointments/<uuid:appointment_id>', appointments.appointment_detail, name='appointment_detail'),

    # inventory
    path('api/medicines', medicines.medicines, name='medicines'),
    path('api/medicines/<uuid:medicine_id>', medicines.medicine_detail, name='medicine_detail'),

    # branding
    path('api/settings/branding', settings.branding_settings, name='branding_settings'),
    path('api/logos', logos.logos, name='logos'),
    path('api/logos/<str:position>', logos.logo_detail, name='logo_detail'),

    # email & dashboard
    path('api/email/send-pdf', email.send_pdf_email, name='send_pdf_email'),
    path('api/admin/dashboard', dashboard.admin_dashboard, name='admin_dashboard'),
]
