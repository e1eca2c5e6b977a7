from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from . import services
from .serializers import UserSerializer, RegisterSerializer, LoginSerializer


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = RegisterSerializer(data=request.data)
    if serializer.is_valid():
        user = services.register(**serializer.validated_data)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    """Exchange email and password for an access token"""
    serializer = LoginSerializer(data=request.data)
    if serializer.is_valid():
        result = services.login(**serializer.validated_data)
        return Response({
            'access_token': result['access_token'],
            'user': UserSerializer(result['user']).data,
        })
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get the authenticated user"""
    return Response(UserSerializer(request.user).data)
