"""
Authz serializers for Practitioner.
"""
from rest_framework import serializers
from apps.authz.models import Practitioner


class PractitionerSerializer(serializers.ModelSerializer):
    """
    Practitioner list/detail/write.

    Reception reads this list to pick the chair when booking and to filter
    the calendar by practitioner.
    """
    user_email = serializers.EmailField(source='user.email', read_only=True)
    role_type_display = serializers.CharField(source='get_role_type_display', read_only=True)

    class Meta:
        model = Practitioner
        fields = [
            'id',
            'user',
            'user_email',
            'display_name',
            'role_type',
            'role_type_display',
            'specialty',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
