from rest_framework import generics, permissions, status, viewsets, mixins
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView
from django.contrib.auth import get_user_model
from django.utils import timezone
from .serializers import (
    LoginSerializer,
    RegistrationSerializer,
    UpdateProfileSerializer,
    UserSerializer,
)
import logging
from utils.permission_helpers import AdminOnlyPermissionMixin
from utils.constants import UserMessage
from exceptions.handlers import PermissionDeniedException
from utils.serializer_helpers import envelope

User = get_user_model()
logger = logging.getLogger("accounts")


def issue_tokens(user):
    """
    Issues a JWT refresh/access pair for the given user.
    """
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


class RegistrationView(generics.GenericAPIView):
    """
    Self-service registration for customers.

    Creates the account with the CUSTOMER role and logs the user in
    straight away by returning a token pair.
    """

    serializer_class = RegistrationSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Customer registered: {user.email} (ID: {user.id})")
        return Response(
            envelope({"tokens": issue_tokens(user), "user": UserSerializer(user).data}),
            status=status.HTTP_201_CREATED,
        )


class LoginView(TokenObtainPairView):
    """
    Handles user authentication and JWT token generation.

    Extends simplejwt's TokenObtainPairView so the response carries the
    user payload alongside the tokens, inside the standard envelope.
    """

    serializer_class = LoginSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data["user"]
        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        logger.info(f"User logged in: {user.email} (ID: {user.id})")

        return Response(
            envelope({"tokens": issue_tokens(user), "user": UserSerializer(user).data})
        )


class ProfileView(generics.RetrieveUpdateAPIView):
    """
    The authenticated user's own profile.
    """

    serializer_class = UpdateProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user

    def get(self, request, *args, **kwargs):
        return Response(envelope(UserSerializer(request.user).data))

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(request.user, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Profile updated: {user.email} (ID: {user.id})")
        return Response(envelope(UserSerializer(user).data))


class UserAdminViewSet(
    AdminOnlyPermissionMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Account administration, restricted to admins.
    """

    queryset = User.objects.all().order_by("email")
    serializer_class = UserSerializer

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response(envelope(serializer.data))

    def retrieve(self, request, *args, **kwargs):
        return Response(envelope(self.get_serializer(self.get_object()).data))

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            raise PermissionDeniedException(UserMessage.CANNOT_DELETE_SELF)
        logger.info(f"User {user.email} (ID: {user.id}) deleted by {request.user.email}")
        user.delete()
        return Response(envelope(message=UserMessage.USER_DELETED))
