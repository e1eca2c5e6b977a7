from rest_framework import serializers
from .models import MAX_QUANTITY, Sweet


class SweetSerializer(serializers.ModelSerializer):
    """Sweet representation; also validates create and partial update payloads"""
    class Meta:
        model = Sweet
        fields = ['id', 'name', 'category', 'price', 'quantity', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'quantity': {'required': True},
        }


class SweetQuerySerializer(serializers.Serializer):
    """Query parameters accepted by the sweet list endpoint"""
    name = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    min_price = serializers.DecimalField(max_digits=None, decimal_places=None, required=False, min_value=0)
    max_price = serializers.DecimalField(max_digits=None, decimal_places=None, required=False, min_value=0)

    def to_filters(self):
        """Validated parameters with blank values dropped"""
        return {key: value for key, value in self.validated_data.items() if value not in ('', None)}


class StockQuantitySerializer(serializers.Serializer):
    """Body of purchase and restock requests"""
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)
