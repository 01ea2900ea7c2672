class GameError(Exception):
    """Base class for rejected game messages.

    ``message`` is safe to show to the sender.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Malformed payload (bad name, missing id, bad guess text)."""


class StateError(GameError):
    """Message is well formed but arrived in the wrong phase."""


class AuthorityError(GameError):
    """Sender is not allowed to issue this message. Never reported back."""
