"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from backend.catalog.models import Sweet
from backend.core.services import issue_access_token
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', role=User.Role.USER):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        return User.objects.create_user(email=email, password=password, role=role)

    @staticmethod
    def create_admin(email=None, password='adminpass123'):
        """Create a test user with the ADMIN role"""
        return TestDataFactory.create_user(email=email, password=password, role=User.Role.ADMIN)

    @staticmethod
    def create_sweet(name=None, category='Indian', price=Decimal('50.00'), quantity=100):
        """Create a test sweet"""
        if not name:
            name = f'Sweet_{TestDataFactory.random_string(6)}'
        return Sweet.objects.create(name=name, category=category, price=price, quantity=quantity)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        token = issue_access_token(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


# Cheap hasher for tests that create many users
FAST_PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
