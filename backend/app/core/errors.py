class ValidationError(Exception):
    """A submitted field breaks a business rule. The reason is shown to the requester."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(reason)
        self.field = field
        self.reason = reason


class StorageError(Exception):
    """The reservation file could not be read, written or parsed."""

    def __init__(self, cause: BaseException | str) -> None:
        super().__init__(str(cause))
        self.cause = cause


class NotificationError(Exception):
    """An email could not be handed to the outbound transport."""

    def __init__(self, cause: BaseException | str) -> None:
        super().__init__(str(cause))
        self.cause = cause
