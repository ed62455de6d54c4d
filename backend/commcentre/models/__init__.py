from .inventory import Product
from .sales import Sale, SaleLine
from .jobs import Job

__all__ = [
    'Product',
    'Sale', 'SaleLine',
    'Job',
]
