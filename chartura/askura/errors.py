class AskuraError(Exception):
    """A failure answering a question, carrying the HTTP status to report."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(AskuraError):
    status_code = 400


class MissingAPIKeyError(AskuraError):
    status_code = 401

    def __init__(self, message: str = "OPENAI_API_KEY is not set on the server."):
        super().__init__(message)


class UpstreamError(AskuraError):
    status_code = 502
