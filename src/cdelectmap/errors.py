class CdElectMapError(Exception):
    """Base class for errors raised by cdelectmap."""


class DataSourceError(CdElectMapError):
    """A dataset or archive could not be located, read or interpreted."""


class UnknownStateError(CdElectMapError, KeyError):
    def __init__(self, value: str):
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return f'Unknown state: {self.value!r}'
