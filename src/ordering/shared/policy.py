"""Business constants for the ordering lifecycle."""

from datetime import timedelta

# Customers may cancel a Pending order for this long after placing it
CANCELLATION_WINDOW = timedelta(hours=1)

VERIFICATION_CODE_LENGTH = 6
ORDER_CODE_TTL_MINUTES = 10
ACCOUNT_CODE_TTL_MINUTES = 10

# Cash on delivery is the only supported payment method
PAYMENT_METHOD = "COD"

# A standalone reservation re-reads and retries this many times when it loses a race
RESERVATION_ATTEMPTS = 3
