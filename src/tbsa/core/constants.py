"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Slug generation
MAX_SLUG_LENGTH = 63

# Hash lengths
SHA256_HEX_LENGTH = 64

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 100
MAX_PHONE_LENGTH = 20
MAX_IPV6_LENGTH = 45
MAX_USER_AGENT_LENGTH = 512
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_CODE_LENGTH = 150
MAX_PERMISSION_RESOURCE_LENGTH = 100
MAX_PERMISSION_ACTION_LENGTH = 50
MAX_PERMISSION_SCOPE_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 500

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Token settings
ACCESS_TOKEN_JTI_LENGTH = 32
REFRESH_TOKEN_BYTES = 32

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"

# Invite codes
INVITE_CODE_LENGTH = 8
INVITE_CODE_MIN_INPUT_LENGTH = 6
INVITE_CODE_CHARACTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
INVITE_CODE_MAX_ATTEMPTS = 10
INVITE_CODE_DEFAULT_EXPIRATION_DAYS = 30

# Buildings and apartments
MAX_BUILDING_FLOORS = 100
MAX_BUILDING_APARTMENTS = 120
MAX_APARTMENT_FLOOR = 50
MAX_APARTMENT_OCCUPANTS = 20
MAX_APARTMENT_SURFACE = 1000
MAX_APARTMENT_BULK_ITEMS = 500

# Water meters
MAX_METER_VALUE = 999_999
MAX_METER_BULK_ITEMS = 10

# Dashboard
RECENT_ACTIVITY_LIMIT = 5

# Role names
SUPER_ADMIN_ROLE = "SUPER_ADMIN"
ADMINISTRATOR_ROLE = "ADMINISTRATOR"
OWNER_ROLE = "OWNER"
