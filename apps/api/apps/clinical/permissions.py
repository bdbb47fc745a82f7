"""
Clinical permissions for API endpoints.

Permission matrix:

    resource          read                               write
    patients          admin, dentist, reception, acct.   admin, dentist, reception
    appointments      admin, dentist, reception          admin, dentist, reception
    treatment plans   admin, dentist, reception          admin, dentist
    calendar          admin, dentist, reception          -

Deletes (soft) are Admin only.
"""
from apps.authz.models import RoleChoices
from apps.authz.permissions import RoleMatrixPermission


FRONT_DESK = frozenset({RoleChoices.ADMIN, RoleChoices.DENTIST, RoleChoices.RECEPTION})


class PatientPermission(RoleMatrixPermission):
    """Accounting can look patients up for invoicing but never edit them."""
    read_roles = FRONT_DESK | {RoleChoices.ACCOUNTING}
    write_roles = FRONT_DESK


class AppointmentPermission(RoleMatrixPermission):
    read_roles = FRONT_DESK
    write_roles = FRONT_DESK


class TreatmentPlanPermission(RoleMatrixPermission):
    """
    Reception reads plans to book the projected visits.
    Only clinicians author them.
    """
    read_roles = FRONT_DESK
    write_roles = frozenset({RoleChoices.ADMIN, RoleChoices.DENTIST})


class CalendarPermission(RoleMatrixPermission):
    read_roles = FRONT_DESK
