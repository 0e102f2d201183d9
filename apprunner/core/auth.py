"""
Current User

The authenticated principal on whose behalf a command runs. Authentication
and permission checks happen before the run engine is invoked; here the
principal only feeds template variables and audit fields.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentUser:
    """
    Authenticated user principal.

    Exposed to templates as @current_user.id, @current_user.email,
    @current_user.firstName and @current_user.lastName.
    """
    user_id: str
    email: str
    first_name: str = ""
    last_name: str = ""

    def template_attributes(self) -> dict[str, str]:
        """Attributes addressable from templates, keyed by property name."""
        return {
            "id": self.user_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }
