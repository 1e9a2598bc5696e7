"""
Top‑level package for the Slot Booking API.

Users reserve time slots of services (rooms, equipment, ...) and
administrators manage services, slots, users and bookings.  All data
lives in a single JSON document managed by
``slot_booking_api.app.core.store.JsonStore``.
"""

__all__ = []
