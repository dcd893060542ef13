import logging

from django.http import HttpResponse

from accounts.models import User

logger = logging.getLogger(__name__)

USER_HEADER = "X-User-NAME"


class MockLoginUserMiddleware:
    """
    Identify API callers by the X-User-NAME header. There is no password or
    token check; real authentication lives outside this service.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith("/api"):
            username = request.headers.get(USER_HEADER)
            if username:
                logger.info("Mock login for user: %s", username)
                try:
                    request.user = User.objects.get(username=username, is_active=True)
                except User.DoesNotExist:
                    return HttpResponse(
                        "User not found or invalid credentials.", status=401
                    )
        return self.get_response(request)
