from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, VerifyView

app_name = 'accounts'

urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('verify/', VerifyView.as_view(), name='verify'),
]
