class StoreError(Exception):
    """Base class for failures raised by the local store and its repositories."""


class StoreUnavailable(StoreError):
    pass


class NotFound(StoreError):
    pass


class DuplicateKey(StoreError):
    pass


class ValidationFailed(StoreError):
    pass
