"""Custom exceptions for dumpkit"""

from typing import Optional


class DumpkitError(Exception):
    """Base exception for all dumpkit errors"""
    pass


class ExternalProcessError(DumpkitError):
    """External client or dump utility failed"""
    def __init__(self, command: str, exit_code: Optional[int], stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr.strip()
        if exit_code is None:
            message = f"{command} could not be started: {self.stderr}"
        else:
            message = f"{command} exited with status {exit_code}"
            if self.stderr:
                message = f"{message}: {self.stderr}"
        super().__init__(message)


class ConfigurationError(DumpkitError):
    """Invalid or unreadable configuration"""
    pass


class PipelineError(DumpkitError):
    """Batch could not run"""
    def __init__(self, message: str, item: str = None):
        super().__init__(message)
        self.item = item


class DumpFileError(DumpkitError):
    """Input dump file is unusable"""
    def __init__(self, message: str, file_path: str = None):
        super().__init__(message)
        self.file_path = file_path


class InvalidNameError(DumpkitError):
    """Database or table name cannot be used"""
    pass
