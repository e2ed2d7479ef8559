"""
Paperless-ngx API client.

Provides:
- Tag catalog retrieval (following pagination)
- Multipart document upload with tag associations
- Typed errors for network, status, decode and file-open failures
"""

from pathlib import Path
from typing import List, Optional, Sequence

import httpx
from loguru import logger
from pydantic import ValidationError

from paperless_uploader.models.schemas import Tag, TagPage
from paperless_uploader.utils.helpers import truncate

TAGS_ENDPOINT = "/api/tags/"
UPLOAD_ENDPOINT = "/api/documents/post_document/"
DOCUMENT_FIELD = "document"
TAGS_FIELD = "tags"


class PaperlessError(Exception):
    """Base class for Paperless client failures."""


class RequestFailedError(PaperlessError):
    """The request could not be sent or no response arrived in time."""


class UnexpectedStatusError(PaperlessError):
    """Paperless answered with a non-success status code."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidResponseError(PaperlessError):
    """The response body could not be decoded."""


class DocumentOpenError(PaperlessError):
    """The document to upload could not be opened."""

    def __init__(self, path: Path, reason: Exception):
        super().__init__(f"failed to open file {path}: {reason}")
        self.path = path


class PaperlessClient:
    """Client for the Paperless-ngx REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize Paperless client.

        Args:
            base_url: Root URL of the Paperless instance
            api_key: API token sent with every request
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout

        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Authorization": f"Token {api_key}"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def __enter__(self) -> "PaperlessClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self):
        """Close the underlying HTTP connection pool."""
        self._client.close()

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request, mapping transport failures to ``RequestFailedError``."""
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise RequestFailedError(f"failed to send {method} {url}: {e}") from e
        except (OSError, UnicodeEncodeError) as e:
            # Reading the document or encoding its name into the form failed
            raise RequestFailedError(f"failed to build {method} {url}: {e}") from e

    def fetch_tags(self) -> List[Tag]:
        """
        Fetch all tags from Paperless.

        Returns:
            List of tags from every page of the listing

        Raises:
            RequestFailedError: Request could not be sent
            UnexpectedStatusError: Non-success status code
            InvalidResponseError: Body is not a valid tag listing
        """
        tags: List[Tag] = []
        url: Optional[str] = TAGS_ENDPOINT
        seen = set()

        while url and url not in seen:
            seen.add(url)
            response = self._send("GET", url)

            if not response.is_success:
                raise UnexpectedStatusError(
                    f"failed to get tags: received status code {response.status_code}",
                    status_code=response.status_code,
                    body=truncate(response.text),
                )

            try:
                page = TagPage.model_validate_json(response.content)
            except ValidationError as e:
                raise InvalidResponseError(f"failed to decode tags response: {e}") from e

            tags.extend(page.results)
            url = page.next

        logger.debug(f"Fetched {len(tags)} tags from Paperless")
        return tags

    def upload_document(self, path: Path, tag_ids: Sequence[int] = ()) -> None:
        """
        Upload a document to Paperless.

        The source file is left untouched.

        Args:
            path: File to upload
            tag_ids: Tag ids to attach to the document

        Raises:
            DocumentOpenError: File could not be opened
            RequestFailedError: Request could not be sent or timed out
            UnexpectedStatusError: Non-success status code (message carries the body)
        """
        path = Path(path)

        try:
            handle = open(path, "rb")
        except OSError as e:
            raise DocumentOpenError(path, e) from e

        with handle:
            files = {DOCUMENT_FIELD: (path.name, handle)}
            data = {TAGS_FIELD: [str(tag_id) for tag_id in tag_ids]} if tag_ids else None
            response = self._send("POST", UPLOAD_ENDPOINT, files=files, data=data)

        if not response.is_success:
            body = truncate(response.text.strip())
            raise UnexpectedStatusError(
                f"failed to upload document: received status code {response.status_code}, body: {body}",
                status_code=response.status_code,
                body=body,
            )
