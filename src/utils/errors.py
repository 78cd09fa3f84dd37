"""Error handling utilities."""


class TaskBoardError(Exception):
    """Base exception for the task board sync core."""
    pass


class RemoteServiceError(TaskBoardError):
    """Remote task service call failed."""
    pass


class TaskNotFoundError(RemoteServiceError):
    """Remote task service does not know the requested task."""
    pass


class ConfigurationError(TaskBoardError):
    """Invalid sync configuration."""
    pass


def error_message(exc: BaseException) -> str:
    """Return a user-facing message for a caught exception."""
    message = str(exc)
    return message if message else "Unknown error occurred"
