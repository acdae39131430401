"""POEditor Strings Exporter Errors.

Every failure of an export run is raised as a subclass of ExportError. Only the
command-line entry point turns these into a process exit status.
"""


class ExportError(Exception):
    """Base class for all fatal export failures."""


class ConfigurationError(ExportError):
    """Settings or command-line options cannot describe a valid export."""


class MalformedPayloadError(ExportError):
    """The export payload is not a list of records with a term and a context."""


class DirectoryCreationError(ExportError):
    """An output folder could not be created."""


class ServiceError(ExportError):
    """The POEditor API rejected a request or could not be reached.

    Attributes:
        code (str | None): The status code reported by POEditor, if any
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class WriteError(ExportError):
    """An exported file could not be written."""
