"""User-facing error taxonomy.

Every component translates its upstream/library failures into one of these
before they leave the component. The message is safe to show to a user;
upstream payloads and stack traces stay in the server log.
"""


class DocCreatorError(Exception):
    """Base class. ``status_code`` is the HTTP status the API responds with."""

    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(DocCreatorError):
    status_code = 400
    default_message = "Invalid input."


class NotFound(DocCreatorError):
    status_code = 404
    default_message = "Not found."


class AuthFailed(DocCreatorError):
    status_code = 401
    default_message = (
        "Authentication failed. Please check your GitHub token or try with a public repository."
    )


class RateLimited(DocCreatorError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later or add a GitHub token."


class UpstreamError(DocCreatorError):
    status_code = 502
    default_message = "Failed to analyze repository. Please check the URL and try again."


class QuotaExceeded(DocCreatorError):
    status_code = 402
    default_message = (
        "Free tier limit reached. Try with a smaller repository or wait for credits to refresh."
    )


class GenerationTimeout(DocCreatorError):
    status_code = 504
    default_message = "Request timeout. Please try again in a moment."


class InvalidRequest(DocCreatorError):
    status_code = 400
    default_message = "Invalid request. Please check your input and try again."


class GenerationFailed(DocCreatorError):
    status_code = 502
    default_message = "Failed to generate documentation with AI. Please try again."


class ExportFailed(DocCreatorError):
    status_code = 500
    default_message = "Failed to export document."
