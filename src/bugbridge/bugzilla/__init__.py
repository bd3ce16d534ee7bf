"""Bugzilla 연동 모듈"""

from bugbridge.bugzilla.client import Bug, BugzillaClient, BugzillaError
from bugbridge.bugzilla.formatting import bug_link, format_assigned_message, format_bug_message

__all__ = [
    "Bug",
    "BugzillaClient",
    "BugzillaError",
    "bug_link",
    "format_assigned_message",
    "format_bug_message",
]
