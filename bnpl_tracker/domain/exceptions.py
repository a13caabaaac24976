"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidDateError(DomainException, ValueError):
    """Date input could not be parsed"""

    pass


class TransactionValidationError(DomainException):
    """Transaction input is incomplete or its shares do not add up"""

    pass


class PaymentValidationError(DomainException):
    """Payment edit would leave a required field empty"""

    pass


class BorrowerError(DomainException):
    """Borrower operation is not allowed (e.g. removing the Personal borrower)"""

    pass


class ImportFormatError(DomainException):
    """Imported document is missing required collections"""

    pass


class NotFoundError(DomainException):
    """Referenced transaction or payment does not exist"""

    pass
