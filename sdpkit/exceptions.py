"""Exception classes for the sdpkit library."""

from __future__ import annotations


class SDPKitException(Exception):
    """Base class for all custom library exceptions."""


class ParseError(SDPKitException, ValueError):
    """Raised when some data cannot be parsed."""


class SDPException(SDPKitException):
    """Base class for all exceptions raised by the SDP module."""


class SDPUnsupportedVersion(SDPException, NotImplementedError):
    """The SDP version is not supported by this library."""


class SDPParseError(SDPException, ParseError):
    """Exception related to SDP data parsing."""


class SDPUnknownFieldError(SDPParseError):
    """Exception raised when an unknown SDP field is encountered."""


class SDPAlignmentError(SDPException):
    """Raised when media flows of two sessions cannot be aligned."""


class SDPNegotiationError(SDPException):
    """Raised when an answer cannot be built from an offer."""


class SDPResolveError(SDPException, OSError):
    """Raised when the effective media address of a flow cannot be resolved."""


class CodecException(SDPKitException):
    """Base class for all exceptions raised by the codecs module."""


class UnknownCodecError(CodecException, KeyError):
    """Raised when a codec is not present in the codecs table."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class CodecParameterError(CodecException, ValueError):
    """Raised when a frame duration or mode is not valid for a codec."""
