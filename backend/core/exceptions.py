"""Identity API errors raised by the service layer and rendered by DRF"""
from rest_framework import status
from rest_framework.exceptions import APIException


class EmailAlreadyExists(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Email already exists'
    default_code = 'email_exists'


class InvalidCredentials(APIException):
    # Same outcome for unknown email and wrong password
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid credentials'
    default_code = 'invalid_credentials'
