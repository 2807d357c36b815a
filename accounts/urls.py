from django.urls import path

from .views import csrf_api, login_api, logout_api, session_api


app_name = "accounts"

urlpatterns = [
    path("api/csrf", csrf_api, name="csrf"),
    path("api/login", login_api, name="login"),
    path("api/logout", logout_api, name="logout"),
    path("api/sessao", session_api, name="session"),
]
