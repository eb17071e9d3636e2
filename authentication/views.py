from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView
from drf_yasg.utils import swagger_auto_schema

from .models import CustomUser
from .permissions import IsAdminRole, IsStaffRole
from .serializers import UserSerializer, UserCreateSerializer, LoginSerializer


class CustomTokenObtainPairView(TokenObtainPairView):
    """
    JWT login for owners, admins and kitchen staff.

    Returns an access/refresh pair plus the user's profile and role.
    """
    serializer_class = LoginSerializer


class MyProfileView(generics.RetrieveAPIView):
    """Current user's profile"""
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsStaffRole]

    def get_object(self):
        return self.request.user


class UserCreateView(generics.CreateAPIView):
    """Create a back-office user (admins only)"""
    queryset = CustomUser.objects.all()
    serializer_class = UserCreateSerializer
    permission_classes = [IsAuthenticated, IsAdminRole]

    @swagger_auto_schema(
        operation_description="Create an owner, admin, kitchen or staff account",
        request_body=UserCreateSerializer,
        responses={201: UserSerializer, 400: 'Bad Request'}
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """Liveness probe"""
    return Response({'status': 'ok'})
