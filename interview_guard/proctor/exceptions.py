"""
Proctoring errors

None of these are fatal to the service: capture failures abort a start,
frozen-session errors guard state after stop, storage errors trigger the
local text-report fallback.
"""


class ProctorError(Exception):
    """Base class for proctoring errors"""


class CaptureUnavailableError(ProctorError):
    """The camera (or another capture capability) could not be opened"""


class SessionFrozenError(ProctorError):
    """Attempt to mutate a session after it was stopped"""


class SessionNotActiveError(ProctorError):
    """Operation requires a running session"""


class ReportStorageError(ProctorError):
    """A report could not be written to or read from storage"""
