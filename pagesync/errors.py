"""Exception types raised by the sync pipeline.

Local I/O failures are not wrapped; they surface as the built-in
OSError subclasses (FileNotFoundError, PermissionError, ...).
"""


class PagesyncError(Exception):
    """Base class for every failure the pipeline raises on its own."""


class PagesAPIError(PagesyncError):
    """Raised when the asset store answers with a non-2xx status.

    The response body is kept verbatim so the caller can surface the
    store's own diagnostic text.
    """

    def __init__(
        self,
        status_code: int,
        body: str,
        method: str = "",
        path: str = "",
    ):
        self.status_code = status_code
        self.body = body
        self.method = method
        self.path = path
        target = f" {method} {path}".rstrip() if method else ""
        super().__init__(
            f"Pages API request{target} failed with status {status_code}: {body}"
        )


class BucketSizeError(PagesyncError):
    """Raised when a single file is larger than the per-bucket byte cap.

    Such a file can never be placed in any bucket, so packing stops
    before it starts.
    """

    def __init__(self, public_path: str, size: int, max_bytes: int):
        self.public_path = public_path
        self.size = size
        self.max_bytes = max_bytes
        super().__init__(
            f"File {public_path} is {size} bytes; the upload limit per batch is {max_bytes} bytes"
        )


class PagesTransportError(PagesyncError):
    """Raised when a request never got a response (timeout, DNS, reset).

    Carries the original httpx exception for upstream logging.
    """

    def __init__(self, method: str, path: str, cause: Exception):
        self.method = method
        self.path = path
        self.cause = cause
        super().__init__(
            f"Pages API request {method} {path} failed: {type(cause).__name__}: {cause}"
        )
