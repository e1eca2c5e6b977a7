"""
Test suite for the identity module
Tests: registration, login, token claims, role permissions and the user store seam
"""
from django.test import SimpleTestCase, TestCase, override_settings
from datetime import timedelta
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APIRequestFactory
from rest_framework_simplejwt.tokens import AccessToken
from backend.core import services
from backend.core.authentication import ReadTolerantJWTAuthentication
from backend.core.exceptions import EmailAlreadyExists, InvalidCredentials
from backend.core.permissions import IsAdminRole, IsAdminRoleOrReadOnly
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, FAST_PASSWORD_HASHERS

User = get_user_model()


class InMemoryUserRepository:
    """User store fake keyed by email"""

    def __init__(self):
        self.users = {}

    def get_by_email(self, email):
        return self.users.get(email)

    def exists_with_email(self, email):
        return email in self.users

    def create(self, email, password, role):
        user = User(id=len(self.users) + 1, email=email, role=role)
        user.set_password(password)
        self.users[email] = user
        return user


@override_settings(PASSWORD_HASHERS=FAST_PASSWORD_HASHERS)
class IdentityServiceTests(SimpleTestCase):
    """Identity services against an in-memory store"""

    def setUp(self):
        self.repository = InMemoryUserRepository()

    def test_register_creates_user_role(self):
        """Test registration creates a USER with a hashed password"""
        user = services.register('sweet@test.com', 'secret1', repository=self.repository)
        self.assertEqual(user.role, User.Role.USER)
        self.assertTrue(user.check_password('secret1'))
        self.assertNotEqual(user.password, 'secret1')

    def test_register_duplicate_email(self):
        """Test registering an existing email fails"""
        services.register('sweet@test.com', 'secret1', repository=self.repository)
        with self.assertRaises(EmailAlreadyExists):
            services.register('sweet@test.com', 'other12', repository=self.repository)
        self.assertEqual(len(self.repository.users), 1)

    def test_email_match_is_exact(self):
        """Test emails are matched exactly as supplied"""
        services.register('Sweet@test.com', 'secret1', repository=self.repository)
        user = services.register('sweet@test.com', 'secret1', repository=self.repository)
        self.assertEqual(user.email, 'sweet@test.com')
        self.assertEqual(len(self.repository.users), 2)

    def test_login_token_claims(self):
        """Test login token carries subject, email and role claims"""
        user = services.register('sweet@test.com', 'secret1', repository=self.repository)
        result = services.login('sweet@test.com', 'secret1', repository=self.repository)
        token = AccessToken(result['access_token'])
        self.assertEqual(token['sub'], str(user.pk))
        self.assertEqual(token['email'], 'sweet@test.com')
        self.assertEqual(token['role'], 'USER')
        self.assertIs(result['user'], user)

    def test_login_failures_are_identical(self):
        """Test unknown email and wrong password raise the same error"""
        services.register('sweet@test.com', 'secret1', repository=self.repository)
        with self.assertRaises(InvalidCredentials) as wrong_password:
            services.login('sweet@test.com', 'wrong-password', repository=self.repository)
        with self.assertRaises(InvalidCredentials) as unknown_email:
            services.login('nobody@test.com', 'secret1', repository=self.repository)
        self.assertEqual(str(wrong_password.exception.detail), str(unknown_email.exception.detail))
        self.assertEqual(wrong_password.exception.get_codes(), unknown_email.exception.get_codes())

    def test_login_inactive_user(self):
        """Test inactive users cannot log in"""
        user = services.register('sweet@test.com', 'secret1', repository=self.repository)
        user.is_active = False
        with self.assertRaises(InvalidCredentials):
            services.login('sweet@test.com', 'secret1', repository=self.repository)


@override_settings(PASSWORD_HASHERS=FAST_PASSWORD_HASHERS)
class RegisterAPITests(TestCase):
    """Test POST /api/auth/register/"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register(self):
        """Test registering via API"""
        response = self.client.post('/api/auth/register/', {'email': 'new@test.com', 'password': 'secret1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['email'], 'new@test.com')
        self.assertEqual(response.data['role'], 'USER')
        self.assertNotIn('password', response.data)
        self.assertTrue(User.objects.get(email='new@test.com').check_password('secret1'))

    def test_register_duplicate_email(self):
        """Test registering a taken email returns 400"""
        TestDataFactory.create_user(email='taken@test.com')
        response = self.client.post('/api/auth/register/', {'email': 'taken@test.com', 'password': 'secret1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['detail'], 'Email already exists')
        self.assertEqual(User.objects.filter(email='taken@test.com').count(), 1)

    def test_register_invalid_email(self):
        """Test registering with a malformed email"""
        response = self.client.post('/api/auth/register/', {'email': 'not-an-email', 'password': 'secret1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_register_short_password(self):
        """Test registering with a too short password"""
        response = self.client.post('/api/auth/register/', {'email': 'new@test.com', 'password': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)
        self.assertFalse(User.objects.filter(email='new@test.com').exists())

    def test_register_ignores_role_in_body(self):
        """Test a role in the register body is ignored"""
        response = self.client.post(
            '/api/auth/register/',
            {'email': 'new@test.com', 'password': 'secret1', 'role': 'ADMIN'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='new@test.com').role, User.Role.USER)


@override_settings(PASSWORD_HASHERS=FAST_PASSWORD_HASHERS)
class LoginAPITests(TestCase):
    """Test POST /api/auth/login/ and GET /api/auth/me/"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='buyer@test.com', password='secret1')
        self.admin = TestDataFactory.create_admin(email='boss@test.com', password='secret1')

    def test_login(self):
        """Test logging in via API"""
        response = self.client.post('/api/auth/login/', {'email': 'buyer@test.com', 'password': 'secret1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access_token', response.data)
        self.assertEqual(response.data['user']['id'], self.user.id)
        self.assertNotIn('password', response.data['user'])
        token = AccessToken(response.data['access_token'])
        self.assertEqual(token['role'], 'USER')
        self.assertEqual(token['sub'], str(self.user.id))

    def test_admin_token_role(self):
        """Test an admin login reports the ADMIN role"""
        response = self.client.post('/api/auth/login/', {'email': 'boss@test.com', 'password': 'secret1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(AccessToken(response.data['access_token'])['role'], 'ADMIN')
        self.assertEqual(response.data['user']['role'], 'ADMIN')

    def test_wrong_password_and_unknown_email_look_the_same(self):
        """Test both login failures return the same 401"""
        wrong = self.client.post('/api/auth/login/', {'email': 'buyer@test.com', 'password': 'nope123'}, format='json')
        unknown = self.client.post('/api/auth/login/', {'email': 'ghost@test.com', 'password': 'secret1'}, format='json')
        self.assertEqual(wrong.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(unknown.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(wrong.data, unknown.data)
        self.assertEqual(wrong.data['detail'], 'Invalid credentials')

    def test_login_missing_fields(self):
        """Test login without email or password"""
        response = self.client.post('/api/auth/login/', {'email': 'buyer@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_me(self):
        """Test fetching the current user"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'buyer@test.com')

    def test_me_requires_token(self):
        """Test the current user endpoint without a token"""
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_rejects_garbage_token(self):
        """Test the current user endpoint with a malformed token"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_token_of_deleted_user_rejected(self):
        """Test a token stops working once its user is deleted"""
        self.client.authenticate_user(self.user)
        self.user.delete()
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(PASSWORD_HASHERS=FAST_PASSWORD_HASHERS)
class RolePermissionTests(TestCase):
    """Test the role permission classes directly"""

    def setUp(self):
        self.factory = APIRequestFactory()
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()

    def _request(self, method, user=None):
        request = getattr(self.factory, method)('/api/sweets/')
        request.user = user
        return request

    def test_admin_role(self):
        """Test IsAdminRole only admits admins"""
        permission = IsAdminRole()
        self.assertTrue(permission.has_permission(self._request('post', self.admin), None))
        self.assertFalse(permission.has_permission(self._request('post', self.user), None))
        self.assertFalse(permission.has_permission(self._request('post', None), None))

    def test_admin_role_or_read_only(self):
        """Test IsAdminRoleOrReadOnly opens reads and guards writes"""
        permission = IsAdminRoleOrReadOnly()
        self.assertTrue(permission.has_permission(self._request('get', None), None))
        self.assertTrue(permission.has_permission(self._request('post', self.admin), None))
        self.assertFalse(permission.has_permission(self._request('patch', self.user), None))
        self.assertFalse(permission.has_permission(self._request('delete', None), None))

    def test_anonymous_user_is_not_admin(self):
        """Test AnonymousUser is never treated as an admin"""
        anonymous = AnonymousUser()
        self.assertFalse(IsAdminRole().has_permission(self._request('post', anonymous), None))
        self.assertTrue(IsAdminRoleOrReadOnly().has_permission(self._request('get', anonymous), None))
        self.assertFalse(IsAdminRoleOrReadOnly().has_permission(self._request('post', anonymous), None))


@override_settings(PASSWORD_HASHERS=FAST_PASSWORD_HASHERS)
class ReadTolerantJWTAuthenticationTests(TestCase):
    """Test the JWT authentication used by endpoints with public reads"""

    def setUp(self):
        self.factory = APIRequestFactory()
        self.authentication = ReadTolerantJWTAuthentication()
        self.user = TestDataFactory.create_user()

    def _request(self, method, token):
        return getattr(self.factory, method)('/api/sweets/', HTTP_AUTHORIZATION=f'Bearer {token}')

    def _expired_token(self):
        token = AccessToken.for_user(self.user)
        token.set_exp(lifetime=-timedelta(minutes=1))
        return str(token)

    def test_valid_token_authenticates(self):
        """Test a valid token authenticates reads and writes alike"""
        token = services.issue_access_token(self.user)
        for method in ('get', 'post'):
            user, _ = self.authentication.authenticate(self._request(method, token))
            self.assertEqual(user, self.user)

    def test_safe_methods_ignore_bad_tokens(self):
        """Test expired or malformed tokens leave reads anonymous"""
        for token in (self._expired_token(), 'not-a-jwt'):
            for method in ('get', 'head', 'options'):
                self.assertIsNone(self.authentication.authenticate(self._request(method, token)))

    def test_unsafe_methods_reject_bad_tokens(self):
        """Test expired or malformed tokens still fail writes"""
        for token in (self._expired_token(), 'not-a-jwt'):
            for method in ('post', 'patch', 'delete'):
                with self.assertRaises(AuthenticationFailed):
                    self.authentication.authenticate(self._request(method, token))
        self.assertTrue(self.authentication.authenticate_header(self._request('post', 'x')))
