# psd_engine/domain/errors.py


class PsdParseError(Exception):
    """Base class for failures while decoding a document buffer."""


class EmptyDocumentError(PsdParseError):
    pass


class PsdFormatError(PsdParseError):
    pass


class PsdCorruptedError(PsdParseError):
    pass


class SourceReadError(Exception):
    """The document bytes could not be fetched from the given source."""


class InvertedBoundsError(ValueError):
    def __init__(self, name: str, width: float, height: float):
        super().__init__(
            f"Container '{name}' has inverted bounds (w={width}, h={height})."
        )
        self.name = name
        self.width = width
        self.height = height
