"""Exceptions raised while loading API description documents."""


class SpecError(Exception):
    """Base class for document-level failures."""


class SpecLoadError(SpecError):
    """The document could not be read or decoded into the expected shape."""


class UnsupportedFormatError(SpecError):
    """The document format is not one we know how to parse."""
