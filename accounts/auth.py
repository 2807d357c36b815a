from __future__ import annotations

from functools import wraps

from django.http import JsonResponse


class Unauthorized(Exception):
    """Raised when no authenticated admin session is bound to the request."""


def ensure_admin(request):
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated or not user.is_active or not user.is_staff:
        raise Unauthorized("Acesso restrito. Faça login.")
    return user


def require_session(view_func):
    """
    Gate an admin JSON view behind an authenticated staff session.
    The wrapped view never runs without one.
    """

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            ensure_admin(request)
        except Unauthorized as exc:
            return JsonResponse({"success": False, "message": str(exc)}, status=401)
        return view_func(request, *args, **kwargs)

    return _wrapped
