"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInvoiceFieldError(DomainException):
    """Invoice field is not text and cannot be TLV-encoded"""

    pass


class FieldTooLongError(DomainException):
    """Invoice field exceeds the 255-byte TLV length limit"""

    def __init__(self, field_name: str, byte_length: int):
        super().__init__(f"Field '{field_name}' is {byte_length} bytes, TLV limit is 255")
        self.field_name = field_name
        self.byte_length = byte_length


class InvalidProviderDataError(DomainException):
    """Row supplied by an external data provider is malformed"""

    pass
