class ReferrerCopError(Exception):
    pass

class ConfigError(ReferrerCopError):
    pass

class ListError(ReferrerCopError):
    pass

class ListParseError(ListError):
    """A list source line could not be compiled into an entry or pattern."""

    def __init__(self, line: int, cause: Exception):
        self.line = line
        self.cause = cause
        super().__init__(f"list parse error at line {line}: {cause}")

class ListNotFoundError(ListError):
    pass

class MissingBlacklistError(ListError):
    """Classification was requested without a blacklist."""
    pass

class FilterError(ReferrerCopError):
    pass

class NoApplicableFormatError(FilterError):
    pass

class UnsupportedInputError(FilterError):
    pass

class UpdateError(ReferrerCopError):
    """Remote blacklist update failed."""
    pass
