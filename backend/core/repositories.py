"""Persistence for users, kept behind a small interface so services can be given a fake store"""
from django.contrib.auth import get_user_model


class UserRepository:
    """ORM-backed user store"""

    @property
    def model(self):
        return get_user_model()

    def get_by_email(self, email):
        return self.model.objects.filter(email=email).first()

    def exists_with_email(self, email):
        return self.model.objects.filter(email=email).exists()

    def create(self, email, password, role):
        return self.model.objects.create_user(email=email, password=password, role=role)
