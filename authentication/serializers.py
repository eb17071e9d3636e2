from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from django.utils import timezone
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import CustomUser


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = ['id', 'username', 'email', 'role', 'is_active', 'last_login_at']
        read_only_fields = fields


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    role = serializers.ChoiceField(choices=CustomUser.ROLE_CHOICES, default=CustomUser.ROLE_ADMIN)

    class Meta:
        model = CustomUser
        fields = ['id', 'username', 'email', 'password', 'role']
        read_only_fields = ['id']

    def validate_username(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Username is required")
        return value

    def validate_email(self, value):
        value = value.strip().lower()
        if CustomUser.objects.filter(email=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        return CustomUser.objects.create_user(password=password, **validated_data)


class LoginSerializer(TokenObtainPairSerializer):
    """JWT login that only admits back-office roles and returns the user profile"""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        token['username'] = user.username
        return token

    def validate(self, attrs):
        data = super().validate(attrs)

        if not self.user.is_staff_role:
            raise serializers.ValidationError('This account has no back-office role.')

        self.user.last_login_at = timezone.now()
        self.user.save(update_fields=['last_login_at'])

        data['user'] = UserSerializer(self.user).data
        return data
