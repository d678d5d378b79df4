"""DocuWriter.ai tool handlers.

Every handler takes a ``DocuWriterClient`` and the raw tool arguments and
returns a response envelope::

    {"success": True, "data": ..., ...}
    {"success": False, "error": "...", "status": 404 | "unknown", "hint": "..."}

Handlers never raise: validation failures, transport errors and API errors
all come back as ``success: False`` envelopes. Arguments are validated
before any request is made.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import structlog
from pydantic import ValidationError

from docuwriter_mcp.client import DocuWriterClient
from docuwriter_mcp.errors import ApiError
from docuwriter_mcp.models import (
    CreateDocumentInput,
    DocumentRefInput,
    GenerateAndAddDocumentationInput,
    GenerateDocumentationInput,
    GenerateOptimizationInput,
    GenerateTestsInput,
    SearchDocumentsInput,
    UpdateDocumentInput,
)

logger = structlog.get_logger(__name__)

Envelope = Dict[str, Any]

GENERATED_CONTENT_PLACEHOLDER = "Documentation generation completed successfully."

# Static per-tool remediation hints. They are attached to every failure of
# the tool regardless of the actual cause.
HINT_USER_INFO = "Check that your DOCUWRITER_API_TOKEN is valid and has not expired"
HINT_LIST_SPACES = "Ensure you have access to at least one documentation space"
HINT_CREATE = "Ensure the space exists, you have write permissions, and all required fields are provided"
HINT_GET = "Ensure the document exists, you have read permissions, and the document belongs to the specified space"
HINT_UPDATE = "Ensure the document exists, you have write permissions, and all provided fields are valid"
HINT_DELETE = "Ensure the document exists, you have delete permissions, and the document belongs to the specified space"
HINT_FILES = "Provide a files array where every file has both filename and source_code properties"
HINT_GENERATE_AND_ADD = "Check that the space exists, you have write permissions, and the source code is valid"


# ─── Envelope Helpers ────────────────────────────────────────────────────────


def _format_validation_error(e: ValidationError) -> str:
    """Turn a pydantic error into a message naming the offending field(s)."""
    messages = []
    for err in e.errors():
        field = ".".join(str(part) for part in err["loc"]) or "arguments"
        if err["type"] == "missing":
            messages.append(f"{field} is required")
        elif err["type"] == "value_error":
            messages.append(f"{field}: {err['ctx']['error']}")
        else:
            messages.append(f"{field}: {err['msg']}")
    return "; ".join(messages)


def _success(data: Any, **extra: Any) -> Envelope:
    return {"success": True, "data": data, **extra}


def _handle_error(tool: str, e: Exception, hint: Optional[str] = None) -> Envelope:
    """Consistent failure envelope."""
    status: Any = "unknown"
    if isinstance(e, ValidationError):
        message = _format_validation_error(e)
    elif isinstance(e, ApiError):
        message = e.message
        if e.status is not None:
            status = e.status
    else:
        message = str(e) or type(e).__name__

    logger.info("tool_failed", tool=tool, error=message, status=status)
    envelope: Envelope = {"success": False, "error": message, "status": status}
    if hint:
        envelope["hint"] = hint
    return envelope


def _unwrap(result: Any) -> Any:
    """API responses wrap their payload in ``data``; fall back to the whole body."""
    if isinstance(result, dict) and "data" in result:
        return result["data"]
    return result


def _data(result: Any) -> Any:
    """The response's ``data`` key, or None when the body has none."""
    return result.get("data") if isinstance(result, dict) else None


def _message(result: Any, default: str) -> str:
    if isinstance(result, dict) and result.get("message"):
        return result["message"]
    return default


# ─── Account & Spaces ────────────────────────────────────────────────────────


async def get_user_info(client: DocuWriterClient, args: Optional[Mapping[str, Any]] = None) -> Envelope:
    """Current user information."""
    try:
        result = await client.get_user_info()
        return _success(_unwrap(result))
    except Exception as e:
        return _handle_error("get_user_info", e, HINT_USER_INFO)


async def list_spaces(client: DocuWriterClient, args: Optional[Mapping[str, Any]] = None) -> Envelope:
    """All documentation spaces visible to the authenticated user."""
    try:
        result = await client.list_spaces()
        spaces = _unwrap(result)
        count = len(spaces) if isinstance(spaces, list) else 0
        return _success(spaces, count=count)
    except Exception as e:
        return _handle_error("list_spaces", e, HINT_LIST_SPACES)


async def search_space_documents(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    """Full-text search inside one space.

    The query is trimmed and must keep at least two characters; ``page``
    defaults to 1, ``per_page`` to 20 (max 100) and ``highlight`` to True.
    """
    try:
        params = SearchDocumentsInput.model_validate(args or {})
        result = await client.search_space_documents(
            params.space_id,
            params.query,
            page=params.page,
            per_page=params.per_page,
            highlight=params.highlight,
        )
        return _success(_unwrap(result), query=params.query, space_id=params.space_id)
    except Exception as e:
        return _handle_error("search_space_documents", e)


# ─── Space Documents ─────────────────────────────────────────────────────────


async def create_space_document(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    try:
        params = CreateDocumentInput.model_validate(args or {})
        result = await client.create_space_document(
            params.space_id,
            title=params.title,
            content=params.content,
            type=params.type,
            parent_id=params.parent_id,
            path=params.path,
        )
        return _success(
            _unwrap(result),
            message=_message(result, "Document created successfully"),
            document_details={
                "title": params.title,
                "type": params.type,
                "space_id": params.space_id,
                "parent_id": params.parent_id or None,
                "path": params.path or None,
            },
        )
    except Exception as e:
        return _handle_error("create_space_document", e, HINT_CREATE)


async def get_space_document(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    try:
        params = DocumentRefInput.model_validate(args or {})
        result = await client.get_space_document(params.space_id, params.document_id)
        return _success(_data(result), message=_message(result, "Document retrieved successfully"))
    except Exception as e:
        return _handle_error("get_space_document", e, HINT_GET)


async def update_space_document(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    """Partial update: only the fields present in ``args`` reach the API.

    An explicit ``parent_id`` of None moves the document to the space root.
    """
    try:
        params = UpdateDocumentInput.model_validate(args or {})
        fields = params.model_dump(
            include={"title", "content", "type", "parent_id"}, exclude_unset=True
        )
        result = await client.update_space_document(params.space_id, params.document_id, fields)

        details: Dict[str, Any] = {"document_id": params.document_id, "space_id": params.space_id}
        for key in ("title", "type", "parent_id"):
            if key in fields:
                details[key] = fields[key]
        return _success(
            _data(result),
            message=_message(result, "Document updated successfully"),
            document_details=details,
        )
    except Exception as e:
        return _handle_error("update_space_document", e, HINT_UPDATE)


async def delete_space_document(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    """Delete a document. Not retried; a second delete surfaces the API's 404."""
    try:
        params = DocumentRefInput.model_validate(args or {})
        result = await client.delete_space_document(params.space_id, params.document_id)
        data = _data(result)
        return _success(
            data,
            message=_message(result, "Document deleted successfully"),
            deletion_details={
                "document_id": params.document_id,
                "space_id": params.space_id,
                "deleted_document_name": data.get("deleted_document_name") if isinstance(data, dict) else None,
                "deleted_at": datetime.now(timezone.utc).isoformat(),
            },
        )
    except Exception as e:
        return _handle_error("delete_space_document", e, HINT_DELETE)


# ─── Generation ──────────────────────────────────────────────────────────────


async def generate_code_documentation(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    """Documentation for one or more files, generated in a single request."""
    try:
        params = GenerateDocumentationInput.model_validate(args or {})
        result = await client.generate_multi_file_documentation(
            [f.model_dump() for f in params.files],
            documentation_type=params.documentation_type,
            output_language=params.output_language,
            additional_instructions=params.additional_instructions,
            name=params.name,
        )
        return _success(_unwrap(result))
    except Exception as e:
        return _handle_error("generate_code_documentation", e, HINT_FILES)


async def generate_code_tests(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    try:
        params = GenerateTestsInput.model_validate(args or {})
        result = await client.generate_code_tests(
            params.source_code,
            params.filename,
            test_type=params.test_type,
            test_framework=params.test_framework,
            additional_instructions=params.additional_instructions,
            name=params.name,
        )
        return _success(_unwrap(result))
    except Exception as e:
        return _handle_error("generate_code_tests", e)


async def generate_code_optimization(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    try:
        params = GenerateOptimizationInput.model_validate(args or {})
        result = await client.generate_code_optimization(
            params.source_code,
            params.filename,
            optimization_focus=params.optimization_focus,
            additional_instructions=params.additional_instructions,
            name=params.name,
        )
        return _success(_unwrap(result))
    except Exception as e:
        return _handle_error("generate_code_optimization", e)


def _generated_content(result: Any) -> str:
    """Pull the generated text out of a documentation response."""
    data = result.get("data") if isinstance(result, dict) else None
    if isinstance(data, dict):
        content = data.get("content") or data.get("markdown")
        if content:
            return content
    return GENERATED_CONTENT_PLACEHOLDER


async def generate_and_add_documentation(client: DocuWriterClient, args: Mapping[str, Any]) -> Envelope:
    """Generate documentation for a file and store it as a markdown document.

    Two sequential requests with no compensation: if storing fails after
    generation succeeded, the generated text is dropped and only the store
    error is reported.
    """
    try:
        params = GenerateAndAddDocumentationInput.model_validate(args or {})
        generation = await client.generate_code_documentation(
            params.source_code,
            params.filename,
            output_language=params.output_language,
            documentation_type=params.documentation_type,
            additional_instructions=params.additional_instructions,
            name=params.name or params.title,
        )
        stored = await client.create_space_document(
            params.space_id,
            title=params.title,
            content=_generated_content(generation),
            type="markdown",
            parent_id=params.parent_id,
            path=params.path,
        )
        return _success(
            {
                "generation": _unwrap(generation),
                "space_document": _unwrap(stored),
                "document_details": {
                    "title": params.title,
                    "space_id": params.space_id,
                    "parent_id": params.parent_id or None,
                    "path": params.path or None,
                },
            }
        )
    except Exception as e:
        return _handle_error("generate_and_add_documentation", e, HINT_GENERATE_AND_ADD)
