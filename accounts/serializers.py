from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    """Admin login form. Format checks happen in LoginService."""

    email = serializers.CharField(max_length=255, allow_blank=True)
    password = serializers.CharField(write_only=True, allow_blank=True, trim_whitespace=False)


class UserSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name']
        read_only_fields = fields
