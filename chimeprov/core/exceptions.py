# ============================================
# FILE: chimeprov/core/exceptions.py
# ============================================

"""
All provisioner-related exceptions
"""


class ProvisionerError(Exception):
    """Base provisioner error"""


class ConfigurationError(ProvisionerError):
    """Invalid provisioner configuration"""


class InvalidRequestTypeError(ProvisionerError):
    """Lifecycle event carried an unknown RequestType"""

    def __init__(self, request_type: str | None):
        self.request_type = request_type
        super().__init__(f"Invalid request type: {request_type}")


class ProviderCallError(ProvisionerError):
    """
    A call to the telephony or stack provider failed.

    Wraps the underlying SDK error so that callers only need to handle one
    exception type per provider call.
    """

    def __init__(self, operation: str, cause: BaseException | None = None):
        self.operation = operation
        self.cause = cause
        message = f"Provider call '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class PollingTimeoutError(ProvisionerError):
    """A polling loop exhausted its attempt or deadline budget"""

    def __init__(self, operation: str, attempts: int, elapsed: float):
        self.operation = operation
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(
            f"Polling '{operation}' timed out after {attempts} attempts ({elapsed:.1f}s)"
        )


class StackNotFoundError(ProvisionerError):
    """No stack matched the requested stack ID"""


class StackOutputsMissingError(StackNotFoundError):
    """The stack was found but declares no outputs"""

    def __init__(self, stack_id: str):
        self.stack_id = stack_id
        super().__init__(f"Stack has no outputs: {stack_id}")


class ResourceAlreadySetError(ProvisionerError):
    """A derived resource identifier was written twice"""

    def __init__(self, field_name: str, current: str, new: str):
        self.field_name = field_name
        self.current = current
        self.new = new
        super().__init__(
            f"'{field_name}' is already set to {current!r}; refusing to overwrite with {new!r}"
        )
