"""Custom filters for uvicorn access logging."""

import logging


class ExcludePathsFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Requests to paths like /metrics and /health will not appear in
    uvicorn's access logs.
    """

    def __init__(self, excluded_paths: list[str] | None = None):
        super().__init__()
        self.excluded_paths = excluded_paths or ["/metrics", "/health"]

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Determine if the log record should be logged.

        Args:
            record: The log record to evaluate.

        Returns:
            False if the request path is in excluded paths, True otherwise.
        """
        message = record.getMessage()
        return not any(
            f" {path} " in message or f" {path}?" in message
            for path in self.excluded_paths
        )
