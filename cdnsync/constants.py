"""
CDN Sync Global Constants

Centralized location for system-wide constants used across the application.
"""

# Registry root path; entries live at cacheDomains/<sha256(domain)>
HOST_REGISTRY_PATH = "cacheDomains"

# Purged on every content change, never heated. Crawlers refill it lazily.
SITEMAP_PATH = "/sitemap.xml"

INDEX_DOCUMENT = "index.html"

DEFAULT_HEAT_DELAY_MS = 10000

# Application Constants
APP_NAME = "CDN Sync"
APP_VERSION = "0.1.0"
