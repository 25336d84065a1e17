"""
Typed Exception Hierarchy for the Invoice Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The documents produced by this package are legal/financial artifacts. Callers
(the document generator, the dashboard API) must react to failures by type,
not by parsing messages:

    try:
        numbering.commit(DocumentType.INVOICE, number)
    except DocumentNumberNotCommittedError as e:
        warn_operator(f"{e.document_number} may be reused on the next run")

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (logged by StructuredFormatter)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InvoiceKernelError (base)
    |
    +-- ConfigurationError
    |   +-- GrossUpConfigurationError
    |   +-- ConfigLoadError
    |
    +-- InputError
    |   +-- UnknownDocumentTypeError
    |   +-- InvalidAmountError
    |
    +-- PersistenceError
        +-- MetadataReadError
        +-- MetadataWriteError
            +-- DocumentNumberNotCommittedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                          | When Raised
--------------|-------------------------------|---------------------------------------
Configuration | GROSS_UP_DENOMINATOR_INVALID  | Gross-up net factor is zero or negative
              | CONFIG_LOAD_ERROR             | YAML config missing, malformed, invalid
--------------|-------------------------------|---------------------------------------
Input         | INPUT_ERROR                   | Unknown tax kind / adjustment type
              | UNKNOWN_DOCUMENT_TYPE         | Not invoice, quotation or receipt
              | INVALID_AMOUNT                | Value cannot be read as a Decimal
--------------|-------------------------------|---------------------------------------
Persistence   | METADATA_READ_ERROR           | Store unreadable (recovered to defaults)
              | METADATA_WRITE_ERROR          | Store unwritable
              | DOCUMENT_NUMBER_NOT_COMMITTED | Document generated, number not saved

===============================================================================
HANDLING PATTERNS
===============================================================================

1. MetadataReadError never reaches callers of the numbering service; it is
   logged and the service continues with default metadata.

2. DocumentNumberNotCommittedError MUST be surfaced prominently: the document
   exists but the counter was not advanced, so the next run can reissue the
   same number.

3. InputError covers only what the engines cannot compute with. Range checks
   (rates in [0, 1], positive quantities) belong to the upstream validator.
"""


class InvoiceKernelError(Exception):
    """
    Base exception for all invoice kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVOICE_KERNEL_ERROR"


# Configuration-related exceptions


class ConfigurationError(InvoiceKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class GrossUpConfigurationError(ConfigurationError):
    """
    Gross-up cannot be solved for the configured tax rates.

    The net factor (1 + vat - withholding, 1 - withholding or 1 + vat) must be
    strictly positive, otherwise the gross base is infinite or negative.
    """

    code: str = "GROSS_UP_DENOMINATOR_INVALID"

    def __init__(self, denominator: str, vat_rate: str, withholding_rate: str):
        self.denominator = denominator
        self.vat_rate = vat_rate
        self.withholding_rate = withholding_rate
        super().__init__(
            f"Cannot gross up with net factor {denominator} "
            f"(vat_rate={vat_rate}, withholding_rate={withholding_rate})"
        )


class ConfigLoadError(ConfigurationError):
    """Configuration file could not be loaded or failed validation."""

    code: str = "CONFIG_LOAD_ERROR"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")


# Input-related exceptions


class InputError(InvoiceKernelError):
    """Input the engines cannot compute with."""

    code: str = "INPUT_ERROR"


class UnknownDocumentTypeError(InputError):
    """Document type is not one of invoice, quotation, receipt."""

    code: str = "UNKNOWN_DOCUMENT_TYPE"

    def __init__(self, document_type: str):
        self.document_type = document_type
        super().__init__(f"Unknown document type: {document_type}")


class InvalidAmountError(InputError):
    """Value cannot be interpreted as a monetary amount."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid amount: {value!r}")


# Persistence-related exceptions


class PersistenceError(InvoiceKernelError):
    """Base exception for metadata store errors."""

    code: str = "PERSISTENCE_ERROR"


class MetadataReadError(PersistenceError):
    """
    Metadata store exists but could not be read or parsed.

    Recovered by the numbering service, which falls back to defaults.
    """

    code: str = "METADATA_READ_ERROR"

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Could not read metadata from {location}: {reason}")


class MetadataWriteError(PersistenceError):
    """Metadata store could not be written."""

    code: str = "METADATA_WRITE_ERROR"

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to write metadata to {location}: {reason}")


class DocumentNumberNotCommittedError(MetadataWriteError):
    """
    A document was generated but its number was not committed.

    The counter was not advanced, so the same number may be issued again on
    the next run.
    """

    code: str = "DOCUMENT_NUMBER_NOT_COMMITTED"

    def __init__(
        self,
        document_type: str,
        document_number: str,
        location: str,
        reason: str,
    ):
        self.document_type = document_type
        self.document_number = document_number
        self.location = location
        self.reason = reason
        InvoiceKernelError.__init__(
            self,
            f"Document {document_number} ({document_type}) was generated but "
            f"its number was not committed to {location}: {reason}. "
            "The number may be reused on the next run.",
        )
