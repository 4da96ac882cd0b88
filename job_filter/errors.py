"""Error taxonomy for the job filter."""


class JobFilterError(Exception):
    """Base class for job filter errors."""


class ContainerNotFound(JobFilterError):
    """The scrollable job list could not be resolved on the current page."""

    def __init__(self, tried: int = 0):
        super().__init__(f"jobs container not found ({tried} strategies tried)")
        self.tried = tried


class StorageUnavailable(JobFilterError):
    """Persisted settings could not be read or written."""


class MessageDeliveryFailure(JobFilterError):
    """No counterpart surface is listening for a message."""
