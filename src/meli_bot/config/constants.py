"""
Centralized application constants.

Single point of truth for the marketplace business constants shared by the
credential manager, the webhook intake and the delivery pipeline.
"""

# ==============================================================================
# CREDENTIAL STORAGE
# ==============================================================================

# Fixed key of the single stored credential record
CREDENTIAL_KEY = "bot_auth"

# Renew this many minutes before the server-declared expiry
DEFAULT_REFRESH_SKEW_MINUTES = 30

# ==============================================================================
# MERCADO LIVRE BUSINESS LOGIC
# ==============================================================================

# Only notifications of this topic are forwarded to the order pipeline
ORDER_TOPIC = "orders_v2"

# Orders must be in this status to receive a delivery message
PAID_STATUS = "paid"

# OAuth grant types accepted by the token endpoint
GRANT_AUTHORIZATION_CODE = "authorization_code"
GRANT_REFRESH_TOKEN = "refresh_token"
