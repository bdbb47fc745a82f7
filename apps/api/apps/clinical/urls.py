"""
Clinical URLs - Patients, Appointments, Treatment plans, Calendar.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AppointmentViewSet,
    CalendarView,
    PatientViewSet,
    TreatmentPlanViewSet,
)

router = DefaultRouter()
router.register(r'patients', PatientViewSet, basename='patient')
router.register(r'appointments', AppointmentViewSet, basename='appointment')
router.register(r'treatment-plans', TreatmentPlanViewSet, basename='treatment-plan')

urlpatterns = [
    # Day / week / month appointment calendar
    path('calendar/', CalendarView.as_view(), name='calendar'),

    # Standard CRUD via router
    path('', include(router.urls)),
]
