"""Domain-specific errors for ibsparse."""


class IbsparseError(Exception):
    """Base error for ibsparse."""


class CatalogValidationError(IbsparseError):
    """Raised when a product file does not conform to schema or semantics."""


class CatalogLoadError(IbsparseError):
    """Raised when reading product definition sources fails."""


class PayloadError(IbsparseError):
    """Base payload decoding error."""


class TruncatedPayloadError(PayloadError):
    """Raised when a field's byte range runs past the end of the buffer."""


class InvalidHexError(PayloadError):
    """Raised when a hex payload string cannot be decoded."""


class AdvertisementError(PayloadError):
    """Raised when advertisement AD structures are malformed."""


class MessageFormatError(IbsparseError):
    """Raised when a gateway message line does not match the expected format."""


class ScanError(IbsparseError):
    """Raised when BLE scanning is unavailable or fails."""
