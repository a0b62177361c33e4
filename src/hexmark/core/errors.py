from __future__ import annotations


class HexmarkError(Exception):
    """Base class for every error raised by the annotation engine."""


class DecodeError(HexmarkError):
    """A cursor operation could not be carried out."""


class OutOfBounds(DecodeError):
    """A read, mark or sub-range would leave its owning range or the byte store."""


class UnterminatedString(DecodeError):
    """No terminator byte was found before the end of the range."""


class DecodeCallbackError(DecodeError):
    """An error escaped from a decoder's `decode` or `detect` callback."""

    def __init__(self, decoder: str, cause: BaseException) -> None:
        super().__init__(f"{decoder}: {cause}")
        self.decoder = decoder
        self.cause = cause


class RegistryError(HexmarkError):
    pass


class DuplicateDecoder(RegistryError):
    def __init__(self, name: str) -> None:
        super().__init__(f"decoder already registered: {name}")
        self.name = name


class UnknownDecoderName(RegistryError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown decoder type: {name}")
        self.name = name


class PluginError(HexmarkError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"cannot load plugin {path}: {cause}")
        self.path = path
        self.cause = cause


class ConfigError(HexmarkError):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors
