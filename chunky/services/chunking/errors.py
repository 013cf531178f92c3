"""Errors raised by the chunking pipeline and the stats observer."""


class ChunkingError(Exception):
    """Base class for chunking failures. Keeps the underlying exception as `cause`."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class OutputDirectoryError(ChunkingError):
    """The output directory could not be created. Raised before any chunk file is written."""

    def __init__(self, output_path: str, cause: Exception | None = None):
        super().__init__(f"Failed to create output directory: {output_path}", cause=cause)
        self.output_path = output_path


class OutputStreamError(ChunkingError):
    """Writing to or closing an open chunk file failed. Fatal to the run."""

    def __init__(self, path: str, cause: Exception | None = None):
        super().__init__(f"Failed to write chunk file: {path}", cause=cause)
        self.path = path


class FileStatsError(ChunkingError):
    """A source file could not be stat-ed for reporting."""

    def __init__(self, file_path: str, cause: Exception | None = None):
        super().__init__(f"Failed to get file stats for: {file_path}", cause=cause)
        self.file_path = file_path
