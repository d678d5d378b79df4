"""
DocuWriter.ai MCP Server
Connects AI assistants to DocuWriter.ai documentation spaces and code
generation (documentation, tests, optimization).

Setup:
  1. pip install docuwriter-mcp
  2. Set DOCUWRITER_API_TOKEN (DOCUWRITER_API_URL overrides the API root)
  3. Register `docuwriter-mcp start` as an MCP server in your assistant,
     or run `docuwriter-mcp install --configure`
"""

import json
from typing import Annotated, Any, Dict, List, Optional

import structlog
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from docuwriter_mcp import tools
from docuwriter_mcp.client import DocuWriterClient
from docuwriter_mcp.config import Settings, log_level_from_env
from docuwriter_mcp.logging_config import configure_logging
from docuwriter_mcp.models import DEFAULT_PER_PAGE, MAX_TITLE_LENGTH, DocumentType, SourceFile

logger = structlog.get_logger(__name__)

SERVER_NAME = "docuwriter_mcp"

mcp = FastMCP(SERVER_NAME)

_client: Optional[DocuWriterClient] = None


class _Unset:
    """Marks an argument the caller did not send (distinct from an explicit null)."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


def get_client() -> DocuWriterClient:
    """Return the shared API client, creating it on first use.

    Construction is deferred to the first tool call so tools can be listed
    without a token. A missing token raises ``ConfigurationError`` here and
    reaches the MCP layer as a tool error.
    """
    global _client
    if _client is None:
        settings = Settings.from_env()
        _client = DocuWriterClient(
            settings.api_token,
            base_url=settings.base_url,
            timeout=settings.timeout,
            verify_tls=settings.verify_tls,
        )
        logger.info("api_client_created", base_url=settings.base_url)
    return _client


def reset_client() -> None:
    """Drop the cached client so the next call re-reads the environment."""
    global _client
    _client = None


def _render(envelope: Dict[str, Any]) -> str:
    return json.dumps(envelope, indent=2, default=str)


def _supplied(**kwargs: Any) -> Dict[str, Any]:
    """Arguments the caller actually sent; None and UNSET mean omitted."""
    return {key: value for key, value in kwargs.items() if value is not None and value is not UNSET}


# Shared argument declarations
SpaceId = Annotated[str, Field(description="The ID of the space", min_length=1)]
DocumentId = Annotated[str, Field(description="The ID of the document", min_length=1)]
SourceCode = Annotated[str, Field(description="The source code to process", min_length=1)]
Filename = Annotated[str, Field(description="Name of the file being processed", min_length=1)]
DocName = Annotated[
    Optional[str],
    Field(description="Optional custom name for the generated output, for better searchability"),
]
Instructions = Annotated[Optional[str], Field(description="Additional instructions for generation")]
ParentId = Annotated[Optional[str], Field(description="The ID of the parent folder (optional)")]
FolderPath = Annotated[
    Optional[str],
    Field(description="Folder path for the document (e.g., 'docs/api'); missing folders are created"),
]


# ─── Account & Spaces ────────────────────────────────────────────────────────


@mcp.tool(
    name="get_user_info",
    annotations={
        "title": "Get User Info",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def get_user_info() -> str:
    """Get information about the authenticated DocuWriter.ai user.

    Returns:
        str: JSON envelope with the user's profile under ``data``.
    """
    return _render(await tools.get_user_info(get_client()))


@mcp.tool(
    name="list_spaces",
    annotations={
        "title": "List Spaces",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def list_spaces() -> str:
    """List all documentation spaces for the authenticated user.

    Use the returned space IDs with the document tools.

    Returns:
        str: JSON envelope with the spaces under ``data`` and their ``count``.
    """
    return _render(await tools.list_spaces(get_client()))


@mcp.tool(
    name="search_space_documents",
    annotations={
        "title": "Search Space Documents",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def search_space_documents(
    space_id: SpaceId,
    query: Annotated[str, Field(description="Search query (minimum 2 characters)", min_length=2)],
    page: Annotated[int, Field(description="Page number for pagination", ge=1)] = 1,
    per_page: Annotated[int, Field(description="Number of results per page", ge=1, le=100)] = DEFAULT_PER_PAGE,
    highlight: Annotated[bool, Field(description="Whether to highlight search terms in results")] = True,
) -> str:
    """Search for documents within a specific documentation space.

    Returns:
        str: JSON envelope with matching documents.
    """
    args = _supplied(space_id=space_id, query=query, page=page, per_page=per_page, highlight=highlight)
    return _render(await tools.search_space_documents(get_client(), args))


# ─── Space Documents ─────────────────────────────────────────────────────────


@mcp.tool(
    name="create_space_document",
    annotations={
        "title": "Create Space Document",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def create_space_document(
    space_id: SpaceId,
    title: Annotated[str, Field(description="The title of the document", min_length=1, max_length=MAX_TITLE_LENGTH)],
    content: Annotated[str, Field(description="The content of the document (markdown or plain text)", min_length=1)],
    type: Annotated[DocumentType, Field(description="The type of content being provided")] = "blank",
    parent_id: ParentId = None,
    path: FolderPath = None,
) -> str:
    """Create a new document in a DocuWriter.ai space.

    Returns:
        str: JSON envelope with the created document.
    """
    args = _supplied(
        space_id=space_id, title=title, content=content, type=type, parent_id=parent_id, path=path
    )
    return _render(await tools.create_space_document(get_client(), args))


@mcp.tool(
    name="get_space_document",
    annotations={
        "title": "Get Space Document",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def get_space_document(space_id: SpaceId, document_id: DocumentId) -> str:
    """Get a specific document from a DocuWriter.ai space."""
    args = _supplied(space_id=space_id, document_id=document_id)
    return _render(await tools.get_space_document(get_client(), args))


@mcp.tool(
    name="update_space_document",
    annotations={
        "title": "Update Space Document",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def update_space_document(
    space_id: SpaceId,
    document_id: DocumentId,
    title: Annotated[
        Optional[str], Field(description="The new title of the document", max_length=MAX_TITLE_LENGTH)
    ] = None,
    content: Annotated[
        Optional[str], Field(description="The new content of the document (markdown or plain text)")
    ] = None,
    type: Annotated[Optional[DocumentType], Field(description="The type of content being provided")] = None,
    *,
    parent_id: Annotated[
        Optional[str],
        Field(
            default_factory=lambda: UNSET,
            description="The ID of the parent folder (null to move to root)",
        ),
    ],
) -> str:
    """Update an existing document in a DocuWriter.ai space.

    Only the fields you provide are changed. Pass parent_id as null to move
    the document to the space root.

    Returns:
        str: JSON envelope with the updated document.
    """
    args = _supplied(
        space_id=space_id, document_id=document_id, title=title, content=content, type=type
    )
    if parent_id is not UNSET:
        args["parent_id"] = parent_id
    return _render(await tools.update_space_document(get_client(), args))


@mcp.tool(
    name="delete_space_document",
    annotations={
        "title": "Delete Space Document",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def delete_space_document(space_id: SpaceId, document_id: DocumentId) -> str:
    """Delete an existing document from a DocuWriter.ai space.

    WARNING: This cannot be undone.
    """
    args = _supplied(space_id=space_id, document_id=document_id)
    return _render(await tools.delete_space_document(get_client(), args))


# ─── Generation ──────────────────────────────────────────────────────────────


@mcp.tool(
    name="generate_code_documentation",
    annotations={
        "title": "Generate Code Documentation",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def generate_code_documentation(
    files: Annotated[
        List[SourceFile],
        Field(description="Files to document (a single file or several), each with filename and source_code"),
    ],
    output_language: Annotated[Optional[str], Field(description="Output language for documentation")] = None,
    documentation_type: Annotated[Optional[str], Field(description="Type of documentation to generate")] = None,
    additional_instructions: Instructions = None,
    name: DocName = None,
) -> str:
    """Generate comprehensive documentation for one or more source files.

    Returns:
        str: JSON envelope with the generated documentation.
    """
    args = _supplied(
        files=[f.model_dump() for f in files],
        output_language=output_language,
        documentation_type=documentation_type,
        additional_instructions=additional_instructions,
        name=name,
    )
    return _render(await tools.generate_code_documentation(get_client(), args))


@mcp.tool(
    name="generate_code_tests",
    annotations={
        "title": "Generate Code Tests",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def generate_code_tests(
    source_code: SourceCode,
    filename: Filename,
    test_type: Annotated[str, Field(description="Type of tests to generate")] = "unit tests",
    test_framework: Annotated[str, Field(description="Testing framework to use")] = "auto-detect",
    additional_instructions: Instructions = None,
    name: DocName = None,
) -> str:
    """Generate a test suite for source code."""
    args = _supplied(
        source_code=source_code,
        filename=filename,
        test_type=test_type,
        test_framework=test_framework,
        additional_instructions=additional_instructions,
        name=name,
    )
    return _render(await tools.generate_code_tests(get_client(), args))


@mcp.tool(
    name="generate_code_optimization",
    annotations={
        "title": "Generate Code Optimization",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def generate_code_optimization(
    source_code: SourceCode,
    filename: Filename,
    optimization_focus: Annotated[str, Field(description="Focus area for optimization")] = "Performance",
    additional_instructions: Instructions = None,
    name: DocName = None,
) -> str:
    """Generate an optimized version of source code."""
    args = _supplied(
        source_code=source_code,
        filename=filename,
        optimization_focus=optimization_focus,
        additional_instructions=additional_instructions,
        name=name,
    )
    return _render(await tools.generate_code_optimization(get_client(), args))


@mcp.tool(
    name="generate_and_add_documentation",
    annotations={
        "title": "Generate and Add Documentation",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def generate_and_add_documentation(
    space_id: SpaceId,
    source_code: SourceCode,
    filename: Filename,
    title: Annotated[
        str, Field(description="Title for the document in the space", min_length=1, max_length=MAX_TITLE_LENGTH)
    ],
    output_language: Annotated[Optional[str], Field(description="Output language for documentation")] = None,
    documentation_type: Annotated[Optional[str], Field(description="Type of documentation to generate")] = None,
    additional_instructions: Instructions = None,
    name: DocName = None,
    parent_id: ParentId = None,
    path: FolderPath = None,
) -> str:
    """Generate documentation for a file and save it to a space as markdown.

    Runs generation, then creates the document. If saving fails, the
    generated documentation is not kept.

    Returns:
        str: JSON envelope with the generation result and the stored document.
    """
    args = _supplied(
        space_id=space_id,
        source_code=source_code,
        filename=filename,
        title=title,
        output_language=output_language,
        documentation_type=documentation_type,
        additional_instructions=additional_instructions,
        name=name,
        parent_id=parent_id,
        path=path,
    )
    return _render(await tools.generate_and_add_documentation(get_client(), args))


# ─── Entry Point ─────────────────────────────────────────────────────────────


def run() -> None:
    """Start the MCP server on stdio."""
    configure_logging(log_level_from_env())
    logger.info("server_starting", server=SERVER_NAME)
    mcp.run()


if __name__ == "__main__":
    run()
