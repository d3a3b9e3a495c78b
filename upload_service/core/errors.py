"""Upload failure taxonomy.

Every failure an upload endpoint can report is an `UploadError`. The
`code` values follow the multer error codes the web client already
understands (`LIMIT_FILE_SIZE`, `LIMIT_UNEXPECTED_FILE`).
"""


class UploadError(Exception):
    code = "UPLOAD_FAILED"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoFileSelected(UploadError):
    code = "NO_FILE_SELECTED"
    status_code = 400

    def __init__(self, message: str = "Error: No File Selected"):
        super().__init__(message)


class InvalidFileType(UploadError):
    code = "INVALID_TYPE"
    status_code = 400


class FileTooLarge(UploadError):
    code = "LIMIT_FILE_SIZE"
    status_code = 413


class UnexpectedFileField(UploadError):
    code = "LIMIT_UNEXPECTED_FILE"
    status_code = 400


class StorageBackendError(UploadError):
    """Network, auth or service error raised by the object store client."""

    code = "STORAGE_BACKEND_FAILURE"
    status_code = 502


class MalformedUpload(UploadError):
    """The request body could not be parsed as a multipart form."""

    code = "INVALID_MULTIPART"
    status_code = 400
