from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.authentication import ReadTolerantJWTAuthentication
from backend.core.permissions import IsAdminRole, IsAdminRoleOrReadOnly
from . import services
from .serializers import SweetSerializer, SweetQuerySerializer, StockQuantitySerializer


@api_view(['GET', 'POST'])
@authentication_classes([ReadTolerantJWTAuthentication])
@permission_classes([IsAdminRoleOrReadOnly])
def sweet_list_create(request):
    """List sweets with optional filters, or create a sweet (admin)"""
    if request.method == 'GET':
        query = SweetQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)
        sweets = services.find_all(query.to_filters())
        return Response(SweetSerializer(sweets, many=True).data)
    else:
        serializer = SweetSerializer(data=request.data)
        if serializer.is_valid():
            sweet = services.create(serializer.validated_data)
            return Response(SweetSerializer(sweet).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@authentication_classes([ReadTolerantJWTAuthentication])
@permission_classes([IsAdminRoleOrReadOnly])
def sweet_detail(request, pk):
    """Retrieve a sweet, or update/delete it (admin)"""
    if request.method == 'GET':
        sweet = services.find_one(pk)
        return Response(SweetSerializer(sweet).data)
    elif request.method == 'PATCH':
        serializer = SweetSerializer(data=request.data, partial=True)
        if serializer.is_valid():
            sweet = services.update(pk, serializer.validated_data)
            return Response(SweetSerializer(sweet).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        services.remove(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sweet_purchase(request, pk):
    """Buy a quantity of a sweet, decreasing its stock"""
    serializer = StockQuantitySerializer(data=request.data)
    if serializer.is_valid():
        sweet = services.purchase(pk, serializer.validated_data['quantity'])
        return Response(SweetSerializer(sweet).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def sweet_restock(request, pk):
    """Add stock to a sweet (admin)"""
    serializer = StockQuantitySerializer(data=request.data)
    if serializer.is_valid():
        sweet = services.restock(pk, serializer.validated_data['quantity'])
        return Response(SweetSerializer(sweet).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
