"""Slack 유틸리티 패키지"""

from bugbridge.slack.formatting import (
    build_notification_blocks,
    build_section_blocks,
    update_message,
)
from bugbridge.slack.identity import IdentityError, UserDirectory

__all__ = [
    "build_notification_blocks",
    "build_section_blocks",
    "update_message",
    "IdentityError",
    "UserDirectory",
]
