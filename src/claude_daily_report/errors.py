"""Error types for daily report generation."""


class DailyReportError(Exception):
    """Base class for all daily report errors."""


class SourceNotFound(DailyReportError):
    """The assistant's projects directory does not exist."""


class ArtifactNotFound(DailyReportError):
    """A summary document or template needed for the report is missing."""

    def __init__(self, message: str, available: list[str] | None = None):
        super().__init__(message)
        self.available = available or []


class ParseError(DailyReportError):
    """A single log line could not be decoded."""


class ExternalToolError(DailyReportError):
    """The summarization backend failed, timed out or returned nothing."""


class TemplateError(DailyReportError):
    """A report template has unbalanced block markers."""


class SummaryMismatch(DailyReportError):
    """Declared totals in a summary document disagree with its contents."""


class CorruptSummary(DailyReportError):
    """A summary document exists but cannot be read, e.g. after an interrupted run."""
