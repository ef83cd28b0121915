from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    LoginView,
    ProfileView,
    RegistrationView,
    UserAdminViewSet,
)

router = DefaultRouter()
router.register(r"users", UserAdminViewSet, basename="users")

urlpatterns = [
    # Authentication
    path("api/auth/register/", RegistrationView.as_view(), name="register"),
    path("api/auth/login/", LoginView.as_view(), name="login"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),

    # Profile of the authenticated user
    path("api/users/me/", ProfileView.as_view(), name="profile"),

    # Admin account management
    path("api/", include(router.urls)),
]
