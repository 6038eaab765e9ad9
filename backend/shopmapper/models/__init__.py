from .logistics import Territory, Lorry, Route
from .shops import Shop, PAYMENT_METHODS, PAYMENT_STATUSES
from .auth import User
from .security import SecurityEvent

__all__ = [
    'Territory', 'Lorry', 'Route',
    'Shop', 'PAYMENT_METHODS', 'PAYMENT_STATUSES',
    'User',
    'SecurityEvent',
]
