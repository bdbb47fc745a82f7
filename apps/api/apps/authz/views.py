"""
Authz views for Practitioner.
"""
from rest_framework import viewsets
from apps.authz.models import Practitioner
from apps.authz.serializers import PractitionerSerializer
from apps.authz.permissions import PractitionerPermission


class PractitionerViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Practitioner endpoints.

    Endpoints:
    - GET /api/v1/practitioners/ - List practitioners (active only by default)
    - GET /api/v1/practitioners/{id}/ - Get practitioner detail
    - POST/PATCH /api/v1/practitioners/ - Admin only

    Query parameters:
    - ?include_inactive=true - Include inactive practitioners
    - ?role_type=dentist|hygienist|assistant - Filter by role
    - ?q=search_term - Search by display_name
    """
    permission_classes = [PractitionerPermission]
    serializer_class = PractitionerSerializer
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def get_queryset(self):
        queryset = Practitioner.objects.select_related('user').all()

        include_inactive = self.request.query_params.get('include_inactive', 'false').lower() == 'true'
        if not include_inactive:
            queryset = queryset.filter(is_active=True)

        role_type = self.request.query_params.get('role_type')
        if role_type:
            queryset = queryset.filter(role_type=role_type)

        q = self.request.query_params.get('q')
        if q:
            queryset = queryset.filter(display_name__icontains=q)

        return queryset.order_by('display_name')
