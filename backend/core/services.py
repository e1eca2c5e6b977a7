"""
Identity operations: registration, login and access token issuing.

Password hashing is delegated to Django's configured hashers and token signing
to simplejwt. Both services accept an optional repository so callers can
substitute the user store.
"""
import logging

from django.contrib.auth.hashers import make_password
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import EmailAlreadyExists, InvalidCredentials
from .models import User
from .repositories import UserRepository

logger = logging.getLogger(__name__)


def issue_access_token(user):
    """Sign a time-limited access token carrying the user's id, email and role"""
    token = AccessToken.for_user(user)
    token['sub'] = str(user.pk)
    token['email'] = user.email
    token['role'] = user.role
    return token


def register(email, password, repository=None):
    """
    Create a USER account for an unused email.

    Raises:
        EmailAlreadyExists: an account with this email is already stored
    """
    repository = repository or UserRepository()

    if repository.exists_with_email(email):
        logger.info(f"Registration rejected, email already exists: {email}")
        raise EmailAlreadyExists()

    user = repository.create(email=email, password=password, role=User.Role.USER)
    logger.info(f"Registered user {user.pk} ({user.email})")
    return user


def login(email, password, repository=None):
    """
    Verify credentials and return ``{'access_token': str, 'user': User}``.

    Unknown emails, wrong passwords and disabled accounts all raise the same
    InvalidCredentials error.
    """
    repository = repository or UserRepository()

    user = repository.get_by_email(email)
    if user is None:
        # Hash anyway so an unknown email takes as long as a wrong password
        make_password(password)
        logger.warning(f"Failed login for unknown email: {email}")
        raise InvalidCredentials()

    if not user.check_password(password) or not user.is_active:
        logger.warning(f"Failed login for user {user.pk}")
        raise InvalidCredentials()

    token = issue_access_token(user)
    logger.info(f"User {user.pk} logged in")
    return {'access_token': str(token), 'user': user}
