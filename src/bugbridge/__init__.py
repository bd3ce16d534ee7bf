"""bugbridge - Bugzilla 새 버그 알림 슬랙 봇"""

__version__ = "0.1.0"
