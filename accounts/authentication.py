from rest_framework.authentication import BaseAuthentication

from .middleware import USER_HEADER


class HeaderUserAuthentication(BaseAuthentication):
    """Hand the user resolved by MockLoginUserMiddleware to DRF."""

    def authenticate(self, request):
        user = getattr(request._request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return (user, None)

    def authenticate_header(self, request):
        return USER_HEADER
