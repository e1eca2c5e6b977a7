from django.urls import path
from .views import register, login, user_me

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', login, name='login'),
    path('auth/me/', user_me, name='user-me'),
]
