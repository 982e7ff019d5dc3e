"""
Exceptions raised by the game service layer.
The scheduling core never raises; these only describe request-level failures.
"""


class SchedulerError(Exception):
    """Base class for service-level errors."""


class GameNotFoundError(SchedulerError):
    """The requested game (or a part of it, such as a period) does not exist."""


class InvalidRequestError(SchedulerError):
    """The request is well-formed JSON but cannot be applied."""


class ConcurrentUpdateError(SchedulerError):
    """The stored game changed since it was read."""
