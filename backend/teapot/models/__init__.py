from .auth import User, SessionToken
from .customers import Customer, Transaction
from .security import SecurityEvent

__all__ = [
    'User', 'SessionToken',
    'Customer', 'Transaction',
    'SecurityEvent',
]
