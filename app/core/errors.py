"""
app/core/errors.py
Failure taxonomy for source fetches.

  NetworkError       transport failure or non-2xx status   → retried by Fetcher
  FetchTimeoutError  request deadline exceeded             → retried by Fetcher
  ParseError         expected markup anchors missing       → degraded record
  ExhaustedRetries   retry budget spent                    → entry marked FAILED
  EmptyBatchError    every key of a batch failed           → entry marked FAILED
"""


class DataSourceError(Exception):
    """Base class for every error raised while talking to an upstream source."""


class NetworkError(DataSourceError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FetchTimeoutError(DataSourceError):
    pass


class ParseError(DataSourceError):
    pass


class ExhaustedRetries(DataSourceError):
    def __init__(self, key: str, attempts: int, cause: BaseException | None):
        super().__init__(f"{key}: gave up after {attempts} attempts ({cause})")
        self.key      = key
        self.attempts = attempts
        self.cause    = cause


class EmptyBatchError(DataSourceError):
    """Every key of a batch failed; there is nothing worth caching."""


RETRYABLE = (NetworkError, FetchTimeoutError)
