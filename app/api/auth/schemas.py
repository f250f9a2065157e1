"""User-facing messages for the auth routes.

The callback answers failures with short plain-text bodies rather than
BaseModel schemas, so only the message constants live here.
"""

FAILED_TO_AUTHORIZE_MESSAGE = "Failed to authorize."
BAD_CODE_MESSAGE = "Bad authorization code."
INTERNAL_ERROR_MESSAGE = "Internal error."
NOT_LOGGED_IN_MESSAGE = "Not logged in."
