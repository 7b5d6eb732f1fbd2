"""
Exception classes for the HTTP message signing SDK
"""

from typing import Optional, Dict, Any


class HttpSigSDKError(Exception):
    """Base exception for all SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(HttpSigSDKError):
    """Exception raised for validation failures"""
    pass


class SfFormatError(ValidationError, ValueError):
    """
    Exception raised when a Structured Field value or key violates the
    grammar, range or character set rules.
    """
    
    def __init__(self, message: str, source: Any = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "SF_FORMAT_ERROR", details)
        self.source = source

