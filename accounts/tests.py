from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from utils.constants import Role

User = get_user_model()


class UserModelTest(TestCase):
    """Test cases for the email-based User model."""

    def test_create_user_defaults_to_customer(self):
        """Test that new accounts are customers and log in by email."""
        user = User.objects.create_user(email="rider@test.com", password="riderpass123")

        self.assertEqual(user.role, Role.CUSTOMER)
        self.assertTrue(user.check_password("riderpass123"))
        self.assertFalse(user.is_staff)
        self.assertFalse(user.is_admin)
        self.assertEqual(User.USERNAME_FIELD, "email")

    def test_create_superuser_is_admin(self):
        """Test that superusers get the ADMIN role and admin site access."""
        admin = User.objects.create_superuser(email="admin@test.com", password="adminpass123")

        self.assertEqual(admin.role, Role.ADMIN)
        self.assertTrue(admin.is_superuser)
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_admin)

    def test_create_user_requires_email(self):
        """Test that an email is mandatory."""
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="nopass123")


class RegistrationAPITest(APITestCase):
    """Test cases for self-service registration."""

    def setUp(self):
        self.url = reverse("register")
        self.payload = {
            "email": "New.Rider@Test.com",
            "password": "Str0ngPassw0rd!",
            "confirmPassword": "Str0ngPassw0rd!",
            "firstName": "New",
            "lastName": "Rider",
        }

    def test_register_returns_tokens(self):
        """Test registration creates a customer and logs them in."""
        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertIn("access", response.data["data"]["tokens"])
        self.assertIn("refresh", response.data["data"]["tokens"])
        self.assertEqual(response.data["data"]["user"]["email"], "new.rider@test.com")
        self.assertEqual(response.data["data"]["user"]["role"], Role.CUSTOMER)

    def test_register_duplicate_email(self):
        """Test that an email can only be registered once."""
        User.objects.create_user(email="new.rider@test.com", password="whatever123")

        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {"success": False, "message": "Email already exists."})

    def test_register_password_mismatch(self):
        """Test that both passwords must match."""
        self.payload["confirmPassword"] = "SomethingElse1!"

        response = self.client.post(self.url, self.payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Passwords do not match.")
        self.assertFalse(User.objects.exists())


class LoginAPITest(APITestCase):
    """Test cases for login and token refresh."""

    def setUp(self):
        self.user = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.url = reverse("login")

    def test_login_success(self):
        """Test that valid credentials return a token pair and the user."""
        response = self.client.post(
            self.url, {"email": "rider@test.com", "password": "riderpass123"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["user"]["id"], self.user.id)
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_login_wrong_password(self):
        """Test that bad credentials answer 401."""
        response = self.client.post(
            self.url, {"email": "rider@test.com", "password": "wrongpass"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {"success": False, "message": "Invalid email or password."})

    def test_access_token_authenticates_requests(self):
        """Test that the issued access token works as a bearer token."""
        login = self.client.post(
            self.url, {"email": "rider@test.com", "password": "riderpass123"}, format="json"
        )
        access = login.data["data"]["tokens"]["access"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        response = self.client.get(reverse("profile"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["email"], "rider@test.com")

    def test_token_refresh(self):
        """Test that a refresh token yields a new access token."""
        login = self.client.post(
            self.url, {"email": "rider@test.com", "password": "riderpass123"}, format="json"
        )

        response = self.client.post(
            reverse("token_refresh"), {"refresh": login.data["data"]["tokens"]["refresh"]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)

    def test_invalid_token_is_rejected(self):
        """Test that a garbage bearer token answers 401 in the error envelope."""
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        response = self.client.get(reverse("profile"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])


class ProfileAPITest(APITestCase):
    """Test cases for the authenticated user's profile."""

    def setUp(self):
        self.user = User.objects.create_user(email="rider@test.com", password="riderpass123")
        self.url = reverse("profile")

    def test_profile_requires_authentication(self):
        """Test that the profile is not public."""
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_profile(self):
        """Test that users can change their names and phone number."""
        self.client.force_authenticate(user=self.user)
        response = self.client.patch(
            self.url, {"firstName": "Ana", "phoneNumber": "+351900000000"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["firstName"], "Ana")
        self.user.refresh_from_db()
        self.assertEqual(self.user.phone_number, "+351900000000")

    def test_role_cannot_be_changed_through_profile(self):
        """Test that the role is not a profile field."""
        self.client.force_authenticate(user=self.user)
        self.client.patch(self.url, {"role": Role.ADMIN}, format="json")

        self.user.refresh_from_db()
        self.assertEqual(self.user.role, Role.CUSTOMER)


class UserAdminAPITest(APITestCase):
    """Test cases for account administration."""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email="admin@test.com", password="adminpass123", role=Role.ADMIN
        )
        self.customer = User.objects.create_user(email="rider@test.com", password="riderpass123")

    def test_admin_lists_users(self):
        """Test that administrators can list all accounts."""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(reverse("users-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 2)

    def test_customer_cannot_list_users(self):
        """Test that customers are forbidden from account administration."""
        self.client.force_authenticate(user=self.customer)
        response = self.client.get(reverse("users-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_admin_deletes_user(self):
        """Test that administrators can delete accounts."""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.delete(reverse("users-detail", args=[self.customer.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "User deleted successfully.")
        self.assertFalse(User.objects.filter(pk=self.customer.pk).exists())

    def test_admin_cannot_delete_self(self):
        """Test that administrators cannot remove their own account."""
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.delete(reverse("users-detail", args=[self.admin_user.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            response.data, {"success": False, "message": "Administrators cannot delete their own account."}
        )
        self.assertTrue(User.objects.filter(pk=self.admin_user.pk).exists())
