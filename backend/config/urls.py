"""
URL configuration for the SweetFlow backend.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "SweetFlow Admin Panel"
admin.site.site_title = "SweetFlow Admin Portal"
admin.site.index_title = "Welcome to the SweetFlow Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('backend.core.urls')),
    path('api/', include('backend.catalog.urls')),
]
