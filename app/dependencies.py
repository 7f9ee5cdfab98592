"""
FastAPI dependency providers
Routers receive repositories and services through Depends so tests can
override any of them with in-memory fakes.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app import config
from app.database import get_db
from app.repositories.order_repository import OrderRepository
from app.repositories.payment_repository import PaymentTransactionRepository
from app.services.order_lifecycle import OrderLifecycleManager
from app.services.order_service import OrderService
from app.services.payhere_gateway import PayHereGateway
from app.services.payment_service import PaymentService
from app.services.sms_service import SMSService

def get_order_repository(db: Session = Depends(get_db)) -> OrderRepository:
    return OrderRepository(db)

def get_payment_repository(db: Session = Depends(get_db)) -> PaymentTransactionRepository:
    return PaymentTransactionRepository(db)

def get_notifier(db: Session = Depends(get_db)) -> SMSService:
    return SMSService(db)

def get_payment_gateway() -> PayHereGateway:
    return PayHereGateway(
        merchant_id=config.PAYHERE_MERCHANT_ID,
        merchant_secret=config.PAYHERE_MERCHANT_SECRET,
        currency=config.PAYHERE_CURRENCY,
        sandbox=config.PAYHERE_SANDBOX,
    )

def get_lifecycle_manager(
    repository: OrderRepository = Depends(get_order_repository),
    notifier: SMSService = Depends(get_notifier),
) -> OrderLifecycleManager:
    return OrderLifecycleManager(repository, notifier)

def get_order_service(
    db: Session = Depends(get_db),
    repository: OrderRepository = Depends(get_order_repository),
    notifier: SMSService = Depends(get_notifier),
) -> OrderService:
    return OrderService(db, repository, notifier)

def get_payment_service(
    gateway: PayHereGateway = Depends(get_payment_gateway),
    orders: OrderRepository = Depends(get_order_repository),
    payments: PaymentTransactionRepository = Depends(get_payment_repository),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle_manager),
    notifier: SMSService = Depends(get_notifier),
) -> PaymentService:
    return PaymentService(gateway, orders, payments, lifecycle, notifier)
