class RegistrationError(Exception):
    """Base exception for command registration failures."""

    pass


class InvalidPath(RegistrationError):
    """Raised when a command path is empty or blank."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Invalid command path: {path!r}")


class DuplicatePath(RegistrationError):
    """Raised when a command path is already registered."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Duplicate command path: {path}")


class InvalidSignature(RegistrationError):
    """Raised when a handler cannot be called as (sender, args)."""

    def __init__(self, handler_name: str, reason: str):
        self.handler_name = handler_name
        self.reason = reason
        super().__init__(
            f"Command handler {handler_name} must have signature (sender, args): {reason}"
        )
