"""Async HTTP client for the DocuWriter.ai REST API."""

import json
from typing import Any, Dict, List, Optional

import httpx
import structlog

from docuwriter_mcp import __version__
from docuwriter_mcp.config import DEFAULT_BASE_URL, REQUEST_TIMEOUT
from docuwriter_mcp.errors import ApiError, ConfigurationError

logger = structlog.get_logger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
USER_AGENT = f"docuwriter-mcp/{__version__}"


def _error_message(response: httpx.Response) -> str:
    """Best-effort error message from a non-2xx response."""
    try:
        payload = json.loads(response.text)
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return str(message)
    return f"HTTP {response.status_code}: {response.reason_phrase}"


class DocuWriterClient:
    """Thin wrapper around the DocuWriter.ai API.

    A fresh ``httpx.AsyncClient`` is opened per request, so one instance can
    be shared by concurrent tool calls without coordination.

    Args:
        token: Bearer token sent with every request.
        base_url: API root; paths are appended verbatim.
        timeout: Per-request timeout in seconds.
        verify_tls: Verify server certificates. Only disabled for local
            development backends (see ``config.is_local_development``).
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        verify_tls: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not token:
            raise ConfigurationError("DOCUWRITER_API_TOKEN is required")
        self.base_url = base_url
        self.timeout = timeout
        self.verify_tls = verify_tls
        self._token = token
        self._transport = transport
        if not verify_tls:
            logger.warning("tls_verification_disabled", base_url=base_url)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ApiError: on a non-2xx response (with ``status``) or a transport
                failure (``status`` is None).
        """
        method = method.upper()
        json_body = body if method in BODY_METHODS else None

        logger.debug("api_request", method=method, path=path)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify_tls,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=self._headers(),
                    json=json_body,
                )
        except httpx.TimeoutException as e:
            logger.warning("api_timeout", method=method, path=path)
            raise ApiError("Request timeout") from e
        except httpx.RequestError as e:
            logger.warning("api_network_error", method=method, path=path, error=str(e))
            raise ApiError(f"Network error: {e}") from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning(
                "api_error", method=method, path=path,
                status=response.status_code, message=message,
            )
            raise ApiError(message, status=response.status_code)

        if not response.content.strip():
            return {}
        return response.json()

    # ─── Account ─────────────────────────────────────────────────────────────

    async def get_user_info(self) -> Any:
        return await self.request("POST", "/user")

    async def list_spaces(self) -> Any:
        return await self.request("GET", "/spaces")

    # ─── Space Documents ─────────────────────────────────────────────────────

    async def search_space_documents(
        self,
        space_id: str,
        query: str,
        page: int = 1,
        per_page: int = 20,
        highlight: bool = True,
    ) -> Any:
        return await self.request(
            "POST",
            f"/spaces/{space_id}/search",
            {"query": query, "page": page, "per_page": per_page, "highlight": highlight},
        )

    async def create_space_document(
        self,
        space_id: str,
        title: str,
        content: str,
        type: str = "blank",
        parent_id: Optional[str] = None,
        path: Optional[str] = None,
    ) -> Any:
        payload: Dict[str, Any] = {"title": title, "content": content, "type": type}
        if parent_id:
            payload["parent_id"] = parent_id
        if path:
            payload["path"] = path
        return await self.request("POST", f"/spaces/{space_id}/documents", payload)

    async def update_space_document(
        self, space_id: str, document_id: str, fields: Dict[str, Any]
    ) -> Any:
        """Partially update a document. Only keys present in ``fields`` are sent."""
        allowed = ("title", "content", "type", "parent_id")
        payload = {key: fields[key] for key in allowed if key in fields}
        return await self.request(
            "PUT", f"/spaces/{space_id}/documents/{document_id}", payload
        )

    async def get_space_document(self, space_id: str, document_id: str) -> Any:
        return await self.request("GET", f"/spaces/{space_id}/documents/{document_id}")

    async def delete_space_document(self, space_id: str, document_id: str) -> Any:
        return await self.request("DELETE", f"/spaces/{space_id}/documents/{document_id}")

    # ─── Generation ──────────────────────────────────────────────────────────

    async def generate_code_documentation(
        self,
        source_code: str,
        filename: str,
        output_language: str = "English",
        documentation_type: str = "General Documentation",
        additional_instructions: str = "",
        name: Optional[str] = None,
    ) -> Any:
        payload: Dict[str, Any] = {
            "source_code": source_code,
            "filename": filename,
            "output_language": output_language,
            "documentation_type": documentation_type,
            "additional_instructions": additional_instructions,
        }
        if name:
            payload["name"] = name
        return await self.request("POST", "/generate-code-documentation", payload)

    async def generate_multi_file_documentation(
        self,
        files: List[Dict[str, str]],
        documentation_type: Optional[str] = None,
        output_language: Optional[str] = None,
        additional_instructions: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Any:
        payload: Dict[str, Any] = {"files": files}
        options = {
            "output_documentation_type": documentation_type,
            "language": output_language,
            "additional_instructions": additional_instructions,
        }
        payload.update({key: value for key, value in options.items() if value is not None})
        if name:
            payload["name"] = name
        return await self.request("POST", "/generate-multi-file-documentation", payload)

    async def generate_code_tests(
        self,
        source_code: str,
        filename: str,
        test_type: str = "unit tests",
        test_framework: str = "auto-detect",
        additional_instructions: str = "",
        name: Optional[str] = None,
    ) -> Any:
        payload: Dict[str, Any] = {
            "source_code": source_code,
            "filename": filename,
            "test_type": test_type,
            "test_framework": test_framework,
            "additional_instructions": additional_instructions,
        }
        if name:
            payload["name"] = name
        return await self.request("POST", "/generate-code-tests", payload)

    async def generate_code_optimization(
        self,
        source_code: str,
        filename: str,
        optimization_focus: str = "Performance",
        additional_instructions: str = "",
        name: Optional[str] = None,
    ) -> Any:
        payload: Dict[str, Any] = {
            "source_code": source_code,
            "filename": filename,
            "optimization_focus": optimization_focus,
            "additional_instructions": additional_instructions,
        }
        if name:
            payload["name"] = name
        return await self.request("POST", "/generate-code-optimization", payload)
