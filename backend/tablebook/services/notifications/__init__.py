# backend/tablebook/services/notifications/__init__.py
"""
Email notifications for reservation events.
"""

from .templates import build_template_vars, render_template
from .mailer import send_reservation_email, send_test_email

__all__ = [
    "build_template_vars",
    "render_template",
    "send_reservation_email",
    "send_test_email",
]
