from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

urlpatterns = [
    # =============== AUTHENTICATION ===============
    path('auth/login/', views.CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', views.MyProfileView.as_view(), name='my_profile'),
    path('auth/users/', views.UserCreateView.as_view(), name='user_create'),

    # =============== SYSTEM ===============
    path('health/', views.health_check, name='health_check'),
]
