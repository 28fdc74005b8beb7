"""Exception hierarchy shared by the traversal engine, the state store and the drivers."""


class ExplorationError(Exception):
    """Base class for every error raised by quiz_explorer."""


class FatalExplorationError(ExplorationError):
    """The run cannot continue without desynchronising the decision stack from the site.

    The exploration agent never persists state after one of these, so the last
    good snapshot stays on disk for the next attempt.
    """


class StructuralMismatch(FatalExplorationError):
    """A page no longer presents the shape (or identity) that was recorded for it."""

    def __init__(self, message: str, page_id: str | None = None) -> None:
        super().__init__(message)
        self.page_id = page_id


class TransientDriverFailure(FatalExplorationError):
    """A UI element stayed unusable after the driver exhausted its retries."""

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class FrontierError(ExplorationError):
    """Invalid use of the frontier cache, e.g. consuming from an exhausted page."""


class StateFileError(ExplorationError):
    """The persisted state document exists but cannot be decoded."""
