from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import LoginSerializer


class LoginView(TokenObtainPairView):
    """
    POST /api/auth/login/

    Exchange email and password for an access/refresh token pair.
    """
    serializer_class = LoginSerializer


class VerifyView(APIView):
    """
    GET /api/auth/verify/

    Confirm the bearer token is still good and return the identity it
    resolves to.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({
            'success': True,
            'user': request.user.identity,
        }, status=status.HTTP_200_OK)
