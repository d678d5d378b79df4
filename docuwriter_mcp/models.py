"""Pydantic input models for the DocuWriter.ai MCP tools.

The MCP layer validates tool arguments against these models before
dispatch; handlers validate again on entry so direct callers get the same
guarantees.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PER_PAGE = 20
MAX_TITLE_LENGTH = 255

DocumentType = Literal["blank", "markdown"]


# ─── Spaces ──────────────────────────────────────────────────────────────────


class SearchDocumentsInput(BaseModel):
    """Input for searching documents in a space."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    space_id: str = Field(..., description="The ID of the space to search in", min_length=1)
    query: str = Field(..., description="Search query (minimum 2 characters)", min_length=2)
    page: int = Field(default=1, description="Page number for pagination", ge=1)
    per_page: int = Field(
        default=DEFAULT_PER_PAGE, description="Number of results per page", ge=1, le=100
    )
    highlight: bool = Field(default=True, description="Whether to highlight search terms in results")


# ─── Space Documents ─────────────────────────────────────────────────────────


class DocumentRefInput(BaseModel):
    """Input identifying a single document in a space."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    space_id: str = Field(..., description="The ID of the space containing the document", min_length=1)
    document_id: str = Field(..., description="The ID of the document", min_length=1)


class CreateDocumentInput(BaseModel):
    """Input for creating a document in a space."""
    model_config = ConfigDict(extra="forbid")

    space_id: str = Field(..., description="The ID of the space to create the document in", min_length=1)
    title: str = Field(
        ..., description="The title of the document", min_length=1, max_length=MAX_TITLE_LENGTH
    )
    content: str = Field(
        ..., description="The content of the document (markdown or plain text)", min_length=1
    )
    type: DocumentType = Field(default="blank", description="The type of content being provided")
    parent_id: Optional[str] = Field(default=None, description="The ID of the parent folder")
    path: Optional[str] = Field(
        default=None,
        description="Folder path for the document (e.g., 'docs/api'); missing folders are created",
    )

    @field_validator("space_id", "title")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UpdateDocumentInput(BaseModel):
    """Input for a partial document update.

    Only the fields the caller actually supplies are forwarded; use
    ``model_dump(exclude_unset=True)`` to recover them.
    """
    model_config = ConfigDict(extra="forbid")

    space_id: str = Field(..., description="The ID of the space containing the document", min_length=1)
    document_id: str = Field(..., description="The ID of the document to update", min_length=1)
    title: Optional[str] = Field(
        default=None, description="The new title of the document", max_length=MAX_TITLE_LENGTH
    )
    content: Optional[str] = Field(
        default=None, description="The new content of the document (markdown or plain text)"
    )
    type: Optional[DocumentType] = Field(default=None, description="The type of content being provided")
    parent_id: Optional[str] = Field(
        default=None, description="The ID of the parent folder (null to move to root)"
    )

    @field_validator("space_id", "document_id")
    @classmethod
    def _strip_ids(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("title", "content", "type", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # only parent_id may be null
        if value is None:
            raise ValueError("must not be null")
        return value


# ─── Generation ──────────────────────────────────────────────────────────────


class SourceFile(BaseModel):
    """A single file submitted for documentation."""
    model_config = ConfigDict(extra="forbid")

    filename: str = Field(..., description="Name of the file", min_length=1)
    source_code: str = Field(..., description="Source code content of the file", min_length=1)


class GenerateDocumentationInput(BaseModel):
    """Input for generating documentation for one or more files."""
    model_config = ConfigDict(extra="forbid")

    files: List[SourceFile] = Field(
        ...,
        description="Files to document (a single file or several)",
    )
    output_language: Optional[str] = Field(default=None, description="Output language for documentation")
    documentation_type: Optional[str] = Field(default=None, description="Type of documentation to generate")
    additional_instructions: Optional[str] = Field(
        default=None, description="Additional instructions for documentation generation"
    )
    name: Optional[str] = Field(
        default=None,
        description="Custom name for the generated documentation, for better searchability",
    )

    @field_validator("files")
    @classmethod
    def _require_files(cls, files: List[SourceFile]) -> List[SourceFile]:
        if not files:
            raise ValueError("No files provided")
        return files


class GenerateTestsInput(BaseModel):
    """Input for generating a test suite."""
    model_config = ConfigDict(extra="forbid")

    source_code: str = Field(..., description="The source code to generate tests for", min_length=1)
    filename: str = Field(..., description="Name of the file being tested", min_length=1)
    test_type: str = Field(default="unit tests", description="Type of tests to generate")
    test_framework: str = Field(default="auto-detect", description="Testing framework to use")
    additional_instructions: str = Field(default="", description="Additional instructions for test generation")
    name: Optional[str] = Field(
        default=None, description="Custom name for the generated tests, for better searchability"
    )


class GenerateOptimizationInput(BaseModel):
    """Input for generating an optimized version of a file."""
    model_config = ConfigDict(extra="forbid")

    source_code: str = Field(..., description="The source code to optimize", min_length=1)
    filename: str = Field(..., description="Name of the file being optimized", min_length=1)
    optimization_focus: str = Field(default="Performance", description="Focus area for optimization")
    additional_instructions: str = Field(default="", description="Additional instructions for code optimization")
    name: Optional[str] = Field(
        default=None, description="Custom name for the optimized code, for better searchability"
    )


class GenerateAndAddDocumentationInput(BaseModel):
    """Input for generating documentation and storing it in a space."""
    model_config = ConfigDict(extra="forbid")

    space_id: str = Field(..., description="The ID of the space to add the documentation to", min_length=1)
    source_code: str = Field(..., description="The source code to document", min_length=1)
    filename: str = Field(..., description="Name of the file being documented", min_length=1)
    title: str = Field(
        ..., description="Title for the document in the space", min_length=1, max_length=MAX_TITLE_LENGTH
    )
    output_language: str = Field(default="English", description="Output language for documentation")
    documentation_type: str = Field(
        default="General Documentation", description="Type of documentation to generate"
    )
    additional_instructions: str = Field(
        default="", description="Additional instructions for documentation generation"
    )
    name: Optional[str] = Field(
        default=None,
        description="Custom name for the generated documentation (defaults to the title)",
    )
    parent_id: Optional[str] = Field(default=None, description="The ID of the parent folder")
    path: Optional[str] = Field(
        default=None,
        description="Folder path for the document (e.g., 'docs/api'); missing folders are created",
    )

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value
