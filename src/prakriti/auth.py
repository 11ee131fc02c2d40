"""Admin credential check.

A single shared admin account with a fixed email/password pair. There is
no token, no expiry, and nothing survives a restart.
"""

ADMIN_EMAIL = "admin@prakritimitra.in"
ADMIN_PASSWORD = "apcnf2022"


def check_admin_credentials(email: str, password: str) -> bool:
    """Return True if the pair matches the admin account exactly."""
    return email == ADMIN_EMAIL and password == ADMIN_PASSWORD


class AdminSession:
    """Holds the "is admin" flag for the lifetime of the process."""

    def __init__(self) -> None:
        self.is_admin = False

    def login(self, email: str, password: str) -> bool:
        self.is_admin = check_admin_credentials(email, password)
        return self.is_admin

    def logout(self) -> None:
        self.is_admin = False
