"""
Notifications Module

Delivers budget alerts to users by email.
"""

from .email_sender import EmailSender, SMTPSettings

__all__ = [
    "EmailSender",
    "SMTPSettings",
]
