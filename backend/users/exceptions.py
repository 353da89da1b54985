from rest_framework import exceptions


class InvalidCredentials(exceptions.AuthenticationFailed):
    """Login failure. Unknown usernames and wrong passwords look the same."""
    default_detail = "Invalid username or password"
    default_code = "invalid_credentials"
