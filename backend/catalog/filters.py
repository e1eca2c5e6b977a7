import django_filters
from .models import Sweet


class SweetFilter(django_filters.FilterSet):
    """
    Catalog search filters, combined with AND:
    - name / category: case-insensitive substring match
    - min_price / max_price: inclusive price bounds
    """
    name = django_filters.CharFilter(field_name='name', lookup_expr='icontains')
    category = django_filters.CharFilter(field_name='category', lookup_expr='icontains')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')

    class Meta:
        model = Sweet
        fields = ['name', 'category', 'min_price', 'max_price']
