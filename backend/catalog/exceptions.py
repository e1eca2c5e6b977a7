"""Catalog API errors raised by the service layer and rendered by DRF"""
from rest_framework import status
from rest_framework.exceptions import APIException


class SweetNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Sweet not found'
    default_code = 'not_found'

    def __init__(self, sweet_id=None):
        detail = f'Sweet with ID {sweet_id} not found' if sweet_id is not None else None
        super().__init__(detail)


class OutOfStock(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Sweet is out of stock'
    default_code = 'out_of_stock'


class InsufficientQuantity(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Insufficient quantity'
    default_code = 'insufficient_quantity'

    def __init__(self, available, requested):
        self.available = available
        self.requested = requested
        super().__init__(f'Insufficient quantity. Available: {available}, Requested: {requested}')


class StockLimitExceeded(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Stock limit exceeded'
    default_code = 'stock_limit_exceeded'

    def __init__(self, available, requested, limit):
        self.available = available
        self.requested = requested
        super().__init__(
            f'Restock would exceed the stock limit of {limit}. Available: {available}, Requested: {requested}'
        )
