"""
Error types raised by the Cadence code generator.

Per-file errors are raised while analyzing one source file; per-contract
errors while resolving nested types from a deployed contract. Both kinds
are caught at their seam (one file, one contract) and recorded as
diagnostics so a batch run can continue.
"""

from typing import Optional


class CodegenError(Exception):
    """Base class for all code generator errors."""

    code = 'E000'

    def __init__(self, message: str, file_path: str = '', contract: str = ''):
        super().__init__(message)
        self.message = message
        self.file_path = file_path
        self.contract = contract


# =============================================================================
# PER-FILE ERRORS
# =============================================================================

class FileUnreadable(CodegenError):
    """A source file or directory could not be read."""
    code = 'E101'


class ParseFailed(CodegenError):
    """The Cadence source could not be parsed."""
    code = 'E102'

    def __init__(self, message: str, file_path: str = '', line: Optional[int] = None):
        super().__init__(message, file_path=file_path)
        self.line = line


class NoEntryPointFound(CodegenError):
    """No transaction, main function or exported function was declared."""
    code = 'E103'


# =============================================================================
# PER-CONTRACT ERRORS
# =============================================================================

class AddressBookMissing(CodegenError):
    """No address book is configured, or it could not be loaded."""
    code = 'E201'


class NetworkUnsupported(CodegenError):
    """The network has no known REST endpoint."""
    code = 'E202'


class ContractNotFound(CodegenError):
    """The contract is unknown to the address book or absent on the account."""
    code = 'E203'


class FetchFailed(CodegenError):
    """The account request failed or returned an unusable response."""
    code = 'E204'


class DecodeFailed(CodegenError):
    """The contract payload was not valid base64-encoded UTF-8."""
    code = 'E205'
