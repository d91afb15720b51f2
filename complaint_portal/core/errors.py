"""Domain errors raised by the stores and the notification publisher."""


class PortalError(Exception):
    """Base class for errors the API layer knows how to translate."""


class InvalidRole(PortalError):
    def __init__(self, role: object):
        super().__init__(f"Invalid user role: {role!r}")
        self.role = role


class DuplicateUser(PortalError):
    """A unique field (email or username) is already taken."""

    def __init__(self, field: str):
        super().__init__(f"User with this {field} already exists")
        self.field = field


class UsernameTaken(PortalError):
    def __init__(self, username: str):
        super().__init__("Username already exists")
        self.username = username


class UserNotFound(PortalError):
    def __init__(self, user_id: str):
        super().__init__("User not found")
        self.user_id = user_id


class ComplaintNotFound(PortalError):
    def __init__(self, complaint_id: str):
        super().__init__("Complaint not found")
        self.complaint_id = complaint_id


class NotificationError(PortalError):
    """Publishing to the notification queue failed."""

    def __init__(self, queue_name: str, cause: Exception):
        super().__init__(f"Failed to publish to queue {queue_name!r}: {cause}")
        self.queue_name = queue_name
