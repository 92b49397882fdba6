"""
CDN Sync

CDN cache invalidation and warming across every host that has served traffic.
"""

__version__ = "0.1.0"
