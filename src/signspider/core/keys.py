"""Shared record keys to avoid magic strings across signspider modules."""

from __future__ import annotations

# Entry record keys (JSON output shape)
K_TITLE = "title"
K_LINK = "link"
K_NAV = "nav"
K_TAGS = "tags"
K_BODY = "body"
K_MEDIA = "media"
K_PROVIDER = "provider"

# Media reference keys
K_METHOD = "method"
K_URL = "url"
MEDIA_METHOD_FETCH = "fetch"

# Provider descriptor
K_PROVIDER_ID = "id"
K_PROVIDER_LINK = "link"
K_PROVIDER_VERB = "verb"
PROVIDER_ID = "spread-the-sign"
PROVIDER_LABEL = "SpreadTheSign"
PROVIDER_VERB = "documented"
