"""
FastAPI dependencies giving handlers access to the shared services.

The store and the services built on it are created once per
application in ``create_app`` and kept on ``app.state``.
"""

from fastapi import Request

from ..core.store import JsonStore
from ..services.booking_service import BookingService
from ..services.service_service import ServiceService
from ..services.user_service import UserService


def get_store(request: Request) -> JsonStore:
    return request.app.state.store


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_service_service(request: Request) -> ServiceService:
    return request.app.state.service_service


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service
