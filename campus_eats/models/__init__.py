from campus_eats.models.user import User
from campus_eats.models.user_session import UserSession
from campus_eats.models.order import Order
from campus_eats.models.order_event import OrderEvent
from campus_eats.models.exchange_listing import ExchangeListing
from campus_eats.models.chat_message import ChatMessage
from campus_eats.models.verification import CourierVerification

# add ALL models here
