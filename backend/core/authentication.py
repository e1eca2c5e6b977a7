from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import SAFE_METHODS
from rest_framework_simplejwt.authentication import JWTAuthentication


class ReadTolerantJWTAuthentication(JWTAuthentication):
    """
    JWT authentication for endpoints whose reads are public.

    On safe methods an expired or malformed bearer token leaves the request
    anonymous instead of failing it. Writes still reject bad tokens with 401.
    """

    def authenticate(self, request):
        try:
            return super().authenticate(request)
        except AuthenticationFailed:
            if request.method in SAFE_METHODS:
                return None
            raise
