"""Exceptions raised while resolving and patching Kubernetes versions."""


class K8sVersionsError(Exception):
    """Base exception for all version update operations."""


class FetchError(K8sVersionsError):
    """Raised when a remote source cannot be reached or answers with an
    error status."""


class DecodeError(K8sVersionsError):
    """Raised when a payload, date or version string cannot be decoded."""


class ResolutionExhausted(K8sVersionsError):
    """Raised when no image exists for any patch level of a release line."""


class FormatError(K8sVersionsError):
    """Raised when an expected pattern is missing from upstream text."""


class FileProcessingError(K8sVersionsError):
    """Raised when a target file cannot be read or written."""


class PartialFailure(K8sVersionsError):
    """Collects the errors of independent operations that failed while
    others may have succeeded.

    """

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(str(err) for err in self.errors))
