from django.urls import path
from .views import sweet_list_create, sweet_detail, sweet_purchase, sweet_restock

urlpatterns = [
    # Sweet endpoints
    path('sweets/', sweet_list_create, name='sweet-list-create'),
    path('sweets/<int:pk>/', sweet_detail, name='sweet-detail'),
    path('sweets/<int:pk>/purchase/', sweet_purchase, name='sweet-purchase'),
    path('sweets/<int:pk>/restock/', sweet_restock, name='sweet-restock'),
]
