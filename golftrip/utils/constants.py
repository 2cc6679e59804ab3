"""
Constants used across the golf trip application.
"""

# Sessions
SESSION_COOKIE_NAME = "session"
SESSION_DURATION_DAYS = 30
SESSION_MAX_AGE_SECONDS = SESSION_DURATION_DAYS * 24 * 60 * 60

# Password reset links
PASSWORD_RESET_EXPIRATION_MINUTES = 60
MIN_PASSWORD_LENGTH = 8

# bcrypt work factor
BCRYPT_ROUNDS = 12

# Tournament venue timezone; tee times are authored and displayed here
VENUE_TIMEZONE = "America/New_York"

# Cabins are numbered 1..4
MIN_CABIN = 1
MAX_CABIN = 4

# Golfer slots per foursome
FOURSOME_SIZE = 4

# Image uploads
MAX_IMAGE_BYTES = 10 * 1024 * 1024

# Gallery pagination
PHOTOS_PER_PAGE = 12
