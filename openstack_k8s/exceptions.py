"""Exceptions related to openstack-k8s."""

__all__ = [
    "OpenStackK8sException",
    "InputException",
    "ObjectNotFoundError",
    "StoreException",
    "CommandException",
    "KubectlException",
    "WaitCancelledError",
]


class OpenStackK8sException(Exception):
    """Generic base exception used for this library."""


class InputException(OpenStackK8sException):
    """Raised when objects or caller input are not formatted as expected."""


class ObjectNotFoundError(OpenStackK8sException):
    """Raised when an object is not found in the store."""


class StoreException(OpenStackK8sException):
    """Raised when the object store fails to serve a request."""


class CommandException(StoreException):
    """Raised when there is a failure running a subcommand."""


class KubectlException(CommandException):
    """Raised when there is a failure running a kubectl command."""


class WaitCancelledError(OpenStackK8sException):
    """Raised when a caller cancels a wait between poll attempts."""

    def __init__(self, resource_name: str, condition_type: str) -> None:
        super().__init__(
            f"Wait for condition '{condition_type}' on {resource_name} was cancelled"
        )
        self.resource_name = resource_name
        self.condition_type = condition_type
