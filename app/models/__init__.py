# Import every model so relationships resolve and create_all sees all tables
from app.models.order import Order
from app.models.customer import Customer
from app.models.menu_item import MenuItem
from app.models.restaurant_table import RestaurantTable
from app.models.payment_transaction import PaymentTransaction
from app.models.sms_log import SMSLog
from app.models.staff_user import StaffUser
from app.models.activity_log import ActivityLog

__all__ = [
    "Order",
    "Customer",
    "MenuItem",
    "RestaurantTable",
    "PaymentTransaction",
    "SMSLog",
    "StaffUser",
    "ActivityLog",
]
