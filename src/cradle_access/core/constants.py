"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 255
MAX_SLUG_LENGTH = 100
MAX_GROUP_LENGTH = 50
MAX_SERIAL_LENGTH = 64
MAX_STATUS_LENGTH = 20
MAX_RELATIONSHIP_TYPE_LENGTH = 20

# User status values
USER_STATUS_ACTIVE = "active"
USER_STATUS_INACTIVE = "inactive"

# Actions with special handling in the decision engine
USER_DELETE_ACTION = "user.delete"

# Token settings
ACCESS_TOKEN_JTI_LENGTH = 32

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
