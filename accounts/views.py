import json
import logging

from django.contrib.auth import authenticate, login, logout
from django.http import JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST

from .auth import Unauthorized, ensure_admin


logger = logging.getLogger(__name__)


@require_GET
@ensure_csrf_cookie
def csrf_api(request):
    """
    GET /api/csrf
    Sets the csrftoken cookie so JSON clients can send X-CSRFToken.
    """
    return JsonResponse({"success": True})


@require_POST
def login_api(request):
    """
    POST /api/login
    Payload (JSON): usuario, senha
    """
    try:
        payload = json.loads(request.body.decode("utf-8") or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JsonResponse({"success": False, "message": "JSON inválido."}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({"success": False, "message": "JSON inválido."}, status=400)

    username = str(payload.get("usuario") or "").strip()
    password = str(payload.get("senha") or "")
    if not username or not password:
        return JsonResponse({"success": False, "message": "Usuário e senha são obrigatórios."}, status=400)

    user = authenticate(request, username=username, password=password)
    if user is None or not user.is_staff:
        logger.warning("Failed admin login for %r", username)
        return JsonResponse({"success": False, "message": "Usuário ou senha inválidos."}, status=401)

    login(request, user)
    logger.info("Admin %s logged in", user.get_username())
    return JsonResponse({"success": True})


@require_POST
def logout_api(request):
    """
    POST /api/logout
    """
    logout(request)
    return JsonResponse({"success": True})


@require_GET
def session_api(request):
    """
    GET /api/sessao
    """
    try:
        user = ensure_admin(request)
    except Unauthorized as exc:
        return JsonResponse({"success": False, "message": str(exc)}, status=401)
    return JsonResponse({"success": True, "usuario": user.get_username()})
