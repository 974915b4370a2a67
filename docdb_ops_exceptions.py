"""
DocDB Operations Exceptions

This module defines custom exceptions for the docdb_ops package
to provide clear error handling and reporting.
"""

class DocDBOpsError(Exception):
    """Base exception for all docdb_ops errors"""
    pass


class ConnectionError(DocDBOpsError):
    """Raised when connection to the document database fails"""
    pass


class ConfigurationError(DocDBOpsError):
    """Raised when configuration is invalid or missing"""
    pass
