"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

errors.py - Exception hierarchy.

ConversionError subclasses abort a whole conversion run.
ResourceError subclasses are scoped to one quiz resource; the converter
catches them and substitutes a placeholder quiz.
"""


class QuizcartError(Exception):
    """Base class for all Quizcart errors"""
    pass


class ConfigurationError(QuizcartError):
    """Invalid settings file or missing credentials"""
    pass


# ============================================================================
# Fatal (whole run)
# ============================================================================

class ConversionError(QuizcartError):
    """Error that aborts the whole conversion"""
    pass


class ExtractionError(ConversionError):
    """Archive could not be opened or contained no entries"""
    pass


class ManifestNotFound(ConversionError):
    """No imsmanifest.xml anywhere in the archive"""
    pass


class ManifestParseError(ConversionError):
    """imsmanifest.xml is not parseable XML"""
    pass


# ============================================================================
# Non-fatal (one resource)
# ============================================================================

class ResourceError(QuizcartError):
    """Error scoped to a single quiz resource."""

    def __init__(self, message: str, identifier: str = ""):
        super().__init__(message)
        self.identifier = identifier


class ContentNotFound(ResourceError):
    """No body file could be resolved for a resource"""
    pass


class ContentParseError(ResourceError):
    """Body file is not parseable or lacks required structure"""
    pass


class UnsupportedFormat(ResourceError):
    """Body root element is neither questestinterop nor assessment"""
    pass
