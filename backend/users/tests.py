from datetime import timedelta
from io import StringIO

from django.conf import settings
from django.contrib.auth.models import User
from django.core.management import CommandError, call_command
from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from core.testing import PASSWORD, SessionMixin, create_user
from users.identity import Identity
from users.middleware import RequestGateMiddleware
from users.models import UserProfile
from users.tokens import SessionToken, issue_session_token, read_session_token


class IdentityTests(SimpleTestCase):

    def test_role_helpers(self):
        admin = Identity(id=1, username="admin", role="admin")
        owner = Identity(id=2, username="owner", role="owner")

        self.assertTrue(admin.is_admin)
        self.assertFalse(admin.is_owner)
        self.assertTrue(owner.is_owner)
        self.assertTrue(owner.has_role("admin", "owner"))
        self.assertFalse(owner.has_role("staff"))

    def test_default_role(self):
        self.assertEqual(Identity(id=3, username="someone").role, "user")


class SessionTokenTests(TestCase):

    def test_token_carries_identity(self):
        user = create_user("pemilik", role=UserProfile.Role.OWNER)

        identity = read_session_token(issue_session_token(user))

        self.assertEqual(identity, Identity(id=user.id, username="pemilik", role="owner"))

    def test_user_without_profile_gets_default_role(self):
        user = User.objects.create_user(username="noprofile", password=PASSWORD)

        identity = read_session_token(issue_session_token(user))

        self.assertEqual(identity.role, UserProfile.DEFAULT_ROLE)


class RequestGateTests(TestCase):

    def setUp(self):
        self.factory = RequestFactory()
        self.seen = []

        def get_response(request):
            self.seen.append(request)
            return HttpResponse("ok")

        self.gate = RequestGateMiddleware(get_response)
        self.admin = create_user("admin", role=UserProfile.Role.ADMIN)
        self.staff = create_user("staff", role=UserProfile.Role.STAFF)
        self.owner = create_user("owner", role=UserProfile.Role.OWNER)

    def request(self, path, token=None):
        extra = {}
        if token:
            extra["HTTP_COOKIE"] = f"{settings.SESSION_COOKIE_NAME_GATE}={token}"
        return self.gate(self.factory.get(path, **extra))

    def test_api_without_session_is_401_json(self):
        response = self.request("/api/villas")

        self.assertEqual(response.status_code, 401)
        self.assertJSONEqual(
            response.content, {"error": "Unauthorized", "message": "Authentication required"}
        )
        self.assertEqual(self.seen, [])

    def test_page_without_session_redirects_to_login(self):
        response = self.request("/report/?date_from=2025-07-01")

        self.assertEqual(response.status_code, 302)
        self.assertEqual(
            response["Location"], "/login?callbackUrl=%2Freport%2F%3Fdate_from%3D2025-07-01"
        )

    def test_public_and_static_paths_pass_through(self):
        for path in ["/login", "/api/login", "/api/auth/session", "/register", "/static/app.css", "/favicon.ico"]:
            with self.subTest(path=path):
                response = self.request(path)
                self.assertEqual(response.status_code, 200)
        self.assertFalse(any(hasattr(request, "identity") for request in self.seen))

    def test_lookalike_public_prefix_is_protected(self):
        response = self.request("/api/loginx")

        self.assertEqual(response.status_code, 401)

    def test_valid_session_attaches_identity(self):
        response = self.request("/api/villas", token=issue_session_token(self.staff))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            self.seen[0].identity, Identity(id=self.staff.id, username="staff", role="staff")
        )

    def test_report_requires_admin_or_owner(self):
        response = self.request("/report/", token=issue_session_token(self.staff))
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], settings.HOME_URL)

        for user in (self.admin, self.owner):
            with self.subTest(role=user.username):
                response = self.request("/report/data/", token=issue_session_token(user))
                self.assertEqual(response.status_code, 200)

    def test_tampered_token_counts_as_no_session(self):
        token = issue_session_token(self.admin)

        with self.assertLogs("users.middleware", level="WARNING"):
            response = self.request("/api/villas", token=token[:-4] + "abcd")

        self.assertEqual(response.status_code, 401)

    def test_expired_token_counts_as_no_session(self):
        token = SessionToken.for_user(self.admin)
        token.set_exp(lifetime=-timedelta(minutes=1))

        with self.assertLogs("users.middleware", level="WARNING"):
            response = self.request("/", token=str(token))

        self.assertEqual(response.status_code, 302)
        self.assertTrue(response["Location"].startswith(settings.LOGIN_URL))

    def test_garbage_cookie_counts_as_no_session(self):
        with self.assertLogs("users.middleware", level="WARNING"):
            response = self.request("/api/users", token="not-a-token")

        self.assertEqual(response.status_code, 401)


class LoginAPITests(APITestCase):
    url = "/api/login"

    def setUp(self):
        self.user = create_user("admin", role=UserProfile.Role.ADMIN)

    def test_login_success_sets_session_cookie(self):
        response = self.client.post(self.url, {"username": "admin", "password": PASSWORD}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["statusCode"], 200)
        self.assertEqual(response.data["data"], {"id": self.user.id, "username": "admin", "role": "admin"})
        self.assertNotIn("password", response.data["data"])

        cookie = response.cookies[settings.SESSION_COOKIE_NAME_GATE]
        self.assertTrue(cookie["httponly"])
        self.assertEqual(cookie["samesite"], "Strict")
        self.assertEqual(cookie["max-age"], 30 * 24 * 60 * 60)
        self.assertEqual(read_session_token(cookie.value).id, self.user.id)

    def test_wrong_password_and_unknown_user_look_the_same(self):
        wrong = self.client.post(self.url, {"username": "admin", "password": "wrong-pass"}, format="json")
        unknown = self.client.post(self.url, {"username": "ghost", "password": PASSWORD}, format="json")

        for response in (wrong, unknown):
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
            self.assertEqual(
                response.data, {"statusCode": 401, "error": "Invalid username or password"}
            )
            self.assertNotIn(settings.SESSION_COOKIE_NAME_GATE, response.cookies)

    def test_missing_fields(self):
        response = self.client.post(self.url, {"username": "admin"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Password is required")

    def test_logout_clears_cookie(self):
        token = self.client.post(
            self.url, {"username": "admin", "password": PASSWORD}, format="json"
        ).cookies[settings.SESSION_COOKIE_NAME_GATE].value
        self.client.cookies[settings.SESSION_COOKIE_NAME_GATE] = token

        response = self.client.post("/api/logout")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.cookies[settings.SESSION_COOKIE_NAME_GATE].value, "")


class LoginPageTests(TestCase):

    def setUp(self):
        create_user("admin", role=UserProfile.Role.ADMIN)

    def test_renders_form(self):
        response = self.client.get("/login", {"callbackUrl": "/report/"})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'name="callbackUrl" value="/report/"')

    def test_success_redirects_to_callback(self):
        response = self.client.post(
            "/login", {"username": "admin", "password": PASSWORD, "callbackUrl": "/report/"}
        )

        self.assertRedirects(response, "/report/", fetch_redirect_response=False)
        self.assertIn(settings.SESSION_COOKIE_NAME_GATE, response.cookies)

    def test_external_callback_falls_back_home(self):
        response = self.client.post(
            "/login", {"username": "admin", "password": PASSWORD, "callbackUrl": "https://evil.example/"}
        )

        self.assertRedirects(response, settings.HOME_URL, fetch_redirect_response=False)

    def test_failure_rerenders_with_error(self):
        response = self.client.post("/login", {"username": "admin", "password": "nope-nope"})

        self.assertEqual(response.status_code, 401)
        self.assertContains(response, "Invalid username or password", status_code=401)


class UserAPITests(SessionMixin, APITestCase):

    def setUp(self):
        self.admin = create_user("admin", role=UserProfile.Role.ADMIN)
        self.staff = create_user("staff", role=UserProfile.Role.STAFF)
        self.login(self.admin)

    def test_list_users_never_exposes_passwords(self):
        response = self.client.get("/api/users")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Users retrieved successfully")
        self.assertEqual([u["username"] for u in response.data["data"]], ["admin", "staff"])
        for user in response.data["data"]:
            self.assertNotIn("password", user)

    def test_admin_creates_user(self):
        response = self.client.post(
            "/api/users", {"username": "pemilik", "password": "rahasia1", "role": "owner"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["role"], "owner")
        self.assertEqual(response.data["data"]["created_by"], "admin")
        created = User.objects.get(username="pemilik")
        self.assertTrue(created.check_password("rahasia1"))
        self.assertNotEqual(created.password, "rahasia1")

    def test_create_requires_admin(self):
        self.login(self.staff)

        response = self.client.post(
            "/api/users", {"username": "pemilik", "password": "rahasia1", "role": "owner"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(User.objects.filter(username="pemilik").exists())

    def test_create_validation(self):
        short = self.client.post(
            "/api/users", {"username": "pemilik", "password": "123", "role": "owner"}, format="json"
        )
        bad_role = self.client.post(
            "/api/users", {"username": "pemilik", "password": "rahasia1", "role": "guest"}, format="json"
        )
        duplicate = self.client.post(
            "/api/users", {"username": "staff", "password": "rahasia1", "role": "staff"}, format="json"
        )

        for response in (short, bad_role, duplicate):
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data["statusCode"], 400)
        self.assertEqual(bad_role.data["error"], "Role must be either 'admin', 'staff' or 'owner'")

    def test_retrieve_and_missing_user(self):
        found = self.client.get(f"/api/users/{self.staff.id}")
        missing = self.client.get("/api/users/9999")

        self.assertEqual(found.data["data"]["username"], "staff")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(missing.data["statusCode"], 404)

    def test_put_updates_username_and_role(self):
        response = self.client.put(
            f"/api/users/{self.staff.id}", {"username": "staff2", "role": "owner"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertEqual(self.staff.username, "staff2")
        self.assertEqual(UserProfile.objects.get(user=self.staff).role, "owner")

    def test_patch_changes_password(self):
        too_short = self.client.patch(f"/api/users/{self.staff.id}", {"password": "123"}, format="json")
        response = self.client.patch(f"/api/users/{self.staff.id}", {"password": "newpass1"}, format="json")

        self.assertEqual(too_short.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertTrue(self.staff.check_password("newpass1"))

    def test_staff_cannot_promote_themselves(self):
        self.login(self.staff)

        response = self.client.put(f"/api/users/{self.staff.id}", {"role": "admin"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"], "Only admins can change roles")
        self.assertEqual(UserProfile.objects.get(user=self.staff).role, "staff")

    def test_staff_can_rename_only_themselves(self):
        self.login(self.staff)

        own = self.client.put(f"/api/users/{self.staff.id}", {"username": "staff2"}, format="json")
        other = self.client.put(f"/api/users/{self.admin.id}", {"username": "hijacked"}, format="json")

        self.assertEqual(own.status_code, status.HTTP_200_OK)
        self.assertEqual(other.status_code, status.HTTP_403_FORBIDDEN)
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.username, "admin")

    def test_staff_cannot_change_another_users_password(self):
        self.login(self.staff)

        response = self.client.patch(f"/api/users/{self.admin.id}", {"password": "takeover1"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password(PASSWORD))

    def test_staff_changes_own_password(self):
        self.login(self.staff)

        response = self.client.patch(f"/api/users/{self.staff.id}", {"password": "newpass1"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertTrue(self.staff.check_password("newpass1"))

    def test_delete_is_admin_only(self):
        self.login(self.staff)
        denied = self.client.delete(f"/api/users/{self.admin.id}")
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)

        self.login(self.admin)
        response = self.client.delete(f"/api/users/{self.staff.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(id=self.staff.id).exists())

        missing = self.client.delete(f"/api/users/{self.staff.id}")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_deleted_user_session_is_rejected(self):
        token = issue_session_token(self.staff)
        self.staff.delete()
        self.client.cookies[settings.SESSION_COOKIE_NAME_GATE] = token

        response = self.client.get("/api/users")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CreateAdminCommandTests(TestCase):

    def test_creates_admin(self):
        call_command("create_admin", "root", "rahasia1", stdout=StringIO())

        user = User.objects.get(username="root")
        self.assertEqual(user.profile.role, UserProfile.Role.ADMIN)
        self.assertTrue(user.check_password("rahasia1"))

    def test_rejects_short_password(self):
        with self.assertRaises(CommandError):
            call_command("create_admin", "root", "123", stdout=StringIO())
        self.assertFalse(User.objects.filter(username="root").exists())
