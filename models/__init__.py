from .user import User
from .room import Room
from .car import Car
from .booking import Booking
from .payment import Payment
from .notification import Notification
from .password_reset import PasswordReset
from .email_verification import EmailVerification
from .favorite import Favorite
from .chat import ChatConversation, ChatMessage


__all__ = [
    "User", "Room", "Car", "Booking", "Payment", "Notification", "PasswordReset",
    "EmailVerification", "Favorite", "ChatConversation", "ChatMessage",
]
