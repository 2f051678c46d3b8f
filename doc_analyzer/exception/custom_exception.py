import sys
import traceback
from typing import Optional


class DocumentAnalyzerException(Exception):
    """
    Project-wide exception that remembers where the wrapped error happened.

    `error_details` may be:
      - an exception instance (the usual `raise ... from e` case)
      - the `sys` module, to read the exception currently being handled
      - None, which also falls back to `sys.exc_info()`
    """

    def __init__(self, error_message, error_details: Optional[object] = None):
        self.error_message = str(error_message)

        if isinstance(error_details, BaseException):
            exc_type = type(error_details)
            exc_value = error_details
            exc_tb = error_details.__traceback__
        elif error_details is not None and hasattr(error_details, "exc_info"):
            exc_type, exc_value, exc_tb = error_details.exc_info()
        else:
            exc_type, exc_value, exc_tb = sys.exc_info()

        # walk to the innermost frame, that is where the failure really is
        last_tb = exc_tb
        while last_tb is not None and last_tb.tb_next is not None:
            last_tb = last_tb.tb_next

        self.file_name = last_tb.tb_frame.f_code.co_filename if last_tb else "<unknown>"
        self.lineno = last_tb.tb_lineno if last_tb else -1

        if exc_type is not None and exc_tb is not None:
            self.traceback_str = "".join(
                traceback.format_exception(exc_type, exc_value, exc_tb)
            )
        else:
            self.traceback_str = ""

        super().__init__(self.error_message)

    def __str__(self) -> str:
        base = (
            f"Error in [{self.file_name}] at line [{self.lineno}] "
            f"| Message: {self.error_message}"
        )
        if self.traceback_str:
            return f"{base}\nTraceback:\n{self.traceback_str}"
        return base


class ClientNotInitializedError(DocumentAnalyzerException):
    """Raised when a model call is attempted before an API key was configured."""


class NoDocumentsError(DocumentAnalyzerException):
    """Raised when chatting before any document was indexed."""


class VectorStoreNotInitializedError(DocumentAnalyzerException):
    """Raised when the vector store is used before `initialize()`."""
