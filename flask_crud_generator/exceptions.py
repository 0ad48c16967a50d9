class CrudGeneratorException(Exception):
    """Base class for every error raised by the generator."""


class ValidationError(CrudGeneratorException, ValueError):
    """An option value is malformed or not supported."""


class EntityNotFoundError(CrudGeneratorException):
    pass


class UnsupportedEntityError(CrudGeneratorException):
    """The entity exists but its mapping can't be scaffolded."""


class FileOperationError(CrudGeneratorException):
    """Exception raised for file operation errors."""


class GeneratedFileExistsError(FileOperationError):
    """A target file exists and overwriting was not requested."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class RoutingError(CrudGeneratorException):
    pass
