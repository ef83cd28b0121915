from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from exceptions.handlers import AlreadyExistsException, UnauthorizedAccessException
from utils.constants import UserMessage
from utils.serializer_helpers import CamelCaseSerializerMixin

User = get_user_model()


class UserSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Public representation of an account, shared by profile and admin views.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone_number",
            "role",
            "is_verified",
            "created_at",
        ]
        read_only_fields = fields


class BookingUserSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Compact account representation embedded in booking payloads.
    """

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name"]
        read_only_fields = fields


class RegistrationSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Validates self-service customer registration.
    """

    password = serializers.CharField(write_only=True)
    confirm_password = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "confirm_password",
            "first_name",
            "last_name",
            "phone_number",
        ]
        extra_kwargs = {"email": {"validators": []}}

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise AlreadyExistsException(UserMessage.EMAIL_ALREADY_EXISTS)
        return value

    def validate(self, data):
        if data["password"] != data.pop("confirm_password"):
            raise serializers.ValidationError(UserMessage.PASSWORD_NOT_MATCH)
        validate_password(data["password"])
        return data

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class LoginSerializer(CamelCaseSerializerMixin, serializers.Serializer):
    """
    Authenticates an email/password pair.

    Returns the validated data with the authenticated user under "user".
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(
            request=self.context.get("request"),
            email=data["email"].strip().lower(),
            password=data["password"],
        )
        if user is None:
            raise UnauthorizedAccessException(UserMessage.INVALID_CREDENTIALS)
        data["user"] = user
        return data


class UpdateProfileSerializer(CamelCaseSerializerMixin, serializers.ModelSerializer):
    """
    Fields a user may change on their own profile.
    """

    class Meta:
        model = User
        fields = ["first_name", "last_name", "phone_number"]
