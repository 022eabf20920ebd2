from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase


class AuthFlowTests(APITestCase):
    def setUp(self):
        self.User = get_user_model()
        self.password = "StrongPass123!"
        self.user = self.User.objects.create_user(
            username="lucia@example.com",
            email="lucia@example.com",
            password=self.password,
            first_name="Lucia",
            last_name="Romero",
        )

    def _signin(self, identifier):
        return self.client.post(
            "/api/auth/signin/",
            {"identifier": identifier, "password": self.password},
            format="json",
        )

    def test_signin_returns_tokens_in_envelope(self):
        resp = self._signin(self.user.email)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.data["success"])
        self.assertIn("access", resp.data["data"])
        self.assertIn("refresh", resp.data["data"])
        self.assertEqual(resp.data["data"]["user"]["email"], self.user.email)

    def test_signin_email_is_case_insensitive(self):
        resp = self._signin("LUCIA@Example.com")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_signin_with_bad_password_fails(self):
        resp = self.client.post(
            "/api/auth/signin/",
            {"identifier": self.user.email, "password": "wrong"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resp.data["success"])

    def test_profile_requires_auth(self):
        resp = self.client.get("/api/account/profile/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(resp.data["success"])

    def test_profile_with_access_token(self):
        access = self._signin(self.user.email).data["data"]["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        resp = self.client.get("/api/account/profile/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["data"]["user"]["email"], self.user.email)

    def test_signout_blacklists_refresh(self):
        refresh = self._signin(self.user.email).data["data"]["refresh"]
        resp = self.client.post("/api/auth/signout/", {"refresh": refresh}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        resp2 = self.client.post("/api/auth/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(resp2.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_signin_with_phone_returns_tokens(self):
        self.user.phone = "+34612345678"
        self.user.save(update_fields=["phone"])
        resp = self._signin(self.user.phone)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn("access", resp.data["data"])
