"""Tests for the tool handlers: validation, delegation and envelopes."""

import httpx
import pytest

from conftest import RecordingClient, request_json
from docuwriter_mcp import tools
from docuwriter_mcp.errors import ApiError


class TestRequiredFields:
    """Missing required fields are rejected before any request is made."""

    @pytest.mark.parametrize(
        "handler, args, field",
        [
            (tools.search_space_documents, {"query": "auth"}, "space_id"),
            (tools.search_space_documents, {"space_id": "s"}, "query"),
            (tools.create_space_document, {"space_id": "s", "content": "c"}, "title"),
            (tools.create_space_document, {"space_id": "s", "title": "t"}, "content"),
            (tools.create_space_document, {"title": "t", "content": "c"}, "space_id"),
            (tools.get_space_document, {"space_id": "s"}, "document_id"),
            (tools.update_space_document, {"document_id": "d"}, "space_id"),
            (tools.delete_space_document, {"space_id": "s"}, "document_id"),
            (tools.generate_code_documentation, {}, "files"),
            (tools.generate_code_tests, {"filename": "a.py"}, "source_code"),
            (tools.generate_code_optimization, {"source_code": "x"}, "filename"),
            (
                tools.generate_and_add_documentation,
                {"space_id": "s", "source_code": "x", "filename": "a.py"},
                "title",
            ),
        ],
    )
    async def test_missing_field(self, recording_client, handler, args, field):
        envelope = await handler(recording_client, args)

        assert envelope["success"] is False
        assert field in envelope["error"]
        assert envelope["status"] == "unknown"
        assert recording_client.calls == []

    async def test_none_args(self, recording_client):
        envelope = await tools.get_space_document(recording_client, None)
        assert envelope["success"] is False
        assert "space_id is required" in envelope["error"]
        assert recording_client.calls == []


class TestSearch:
    async def test_query_too_short(self, recording_client):
        envelope = await tools.search_space_documents(recording_client, {"space_id": "s", "query": "a"})
        assert envelope["success"] is False
        assert "query" in envelope["error"]
        assert recording_client.calls == []

    async def test_query_trimmed_before_length_check(self, recording_client):
        envelope = await tools.search_space_documents(recording_client, {"space_id": "s", "query": "  a  "})
        assert envelope["success"] is False
        assert recording_client.calls == []

    async def test_two_characters_accepted_with_defaults(self, recording_client):
        envelope = await tools.search_space_documents(recording_client, {"space_id": "s", "query": " ab "})

        assert envelope["success"] is True
        assert envelope["query"] == "ab"
        assert envelope["space_id"] == "s"
        name, args, kwargs = recording_client.calls[0]
        assert name == "search_space_documents"
        assert args == ("s", "ab")
        assert kwargs == {"page": 1, "per_page": 20, "highlight": True}

    @pytest.mark.parametrize("per_page", [0, 101])
    async def test_per_page_bounds(self, recording_client, per_page):
        envelope = await tools.search_space_documents(
            recording_client, {"space_id": "s", "query": "ab", "per_page": per_page}
        )
        assert envelope["success"] is False
        assert "per_page" in envelope["error"]
        assert recording_client.calls == []

    async def test_page_must_be_positive(self, recording_client):
        envelope = await tools.search_space_documents(
            recording_client, {"space_id": "s", "query": "ab", "page": 0}
        )
        assert envelope["success"] is False
        assert "page" in envelope["error"]

    async def test_no_hint_on_failure(self):
        client = RecordingClient(errors={"search_space_documents": ApiError("boom", 500)})
        envelope = await tools.search_space_documents(client, {"space_id": "s", "query": "ab"})
        assert envelope == {"success": False, "error": "boom", "status": 500}


class TestCreateDocument:
    async def test_title_of_255_accepted(self, recording_client):
        envelope = await tools.create_space_document(
            recording_client, {"space_id": "s", "title": "a" * 255, "content": "c"}
        )
        assert envelope["success"] is True
        assert len(recording_client.calls) == 1

    async def test_title_of_256_rejected(self, recording_client):
        envelope = await tools.create_space_document(
            recording_client, {"space_id": "s", "title": "a" * 256, "content": "c"}
        )
        assert envelope["success"] is False
        assert "title" in envelope["error"]
        assert envelope["hint"] == tools.HINT_CREATE
        assert recording_client.calls == []

    async def test_type_defaults_to_blank(self, recording_client):
        envelope = await tools.create_space_document(
            recording_client, {"space_id": "s", "title": "  Guide  ", "content": "c"}
        )
        _, _, kwargs = recording_client.calls[0]
        assert kwargs["type"] == "blank"
        assert kwargs["title"] == "Guide"
        assert envelope["document_details"] == {
            "title": "Guide",
            "type": "blank",
            "space_id": "s",
            "parent_id": None,
            "path": None,
        }
        assert envelope["message"] == "Document created successfully"

    async def test_invalid_type_rejected(self, recording_client):
        envelope = await tools.create_space_document(
            recording_client, {"space_id": "s", "title": "t", "content": "c", "type": "html"}
        )
        assert envelope["success"] is False
        assert "type" in envelope["error"]
        assert recording_client.calls == []

    async def test_api_message_passed_through(self):
        client = RecordingClient(
            responses={"create_space_document": {"data": {"id": "d1"}, "message": "Created!"}}
        )
        envelope = await tools.create_space_document(client, {"space_id": "s", "title": "t", "content": "c"})
        assert envelope["data"] == {"id": "d1"}
        assert envelope["message"] == "Created!"


class TestUpdateDocument:
    async def test_only_supplied_fields_forwarded(self, recording_client):
        envelope = await tools.update_space_document(
            recording_client, {"space_id": "s", "document_id": "d", "title": "X"}
        )

        assert envelope["success"] is True
        name, args, _ = recording_client.calls[0]
        assert name == "update_space_document"
        assert args == ("s", "d", {"title": "X"})
        assert envelope["document_details"] == {"document_id": "d", "space_id": "s", "title": "X"}

    async def test_title_over_limit_rejected(self, recording_client):
        envelope = await tools.update_space_document(
            recording_client, {"space_id": "s", "document_id": "d", "title": "a" * 256}
        )
        assert envelope["success"] is False
        assert recording_client.calls == []

    async def test_invalid_type_rejected(self, recording_client):
        envelope = await tools.update_space_document(
            recording_client, {"space_id": "s", "document_id": "d", "type": "pdf"}
        )
        assert envelope["success"] is False
        assert envelope["hint"] == tools.HINT_UPDATE

    @pytest.mark.parametrize("field", ["title", "content", "type"])
    async def test_null_field_rejected(self, recording_client, field):
        envelope = await tools.update_space_document(
            recording_client, {"space_id": "s", "document_id": "d", field: None}
        )
        assert envelope["success"] is False
        assert envelope["error"] == f"{field}: must not be null"
        assert envelope["hint"] == tools.HINT_UPDATE
        assert recording_client.calls == []

    async def test_null_parent_id_moves_to_root(self, recording_client):
        envelope = await tools.update_space_document(
            recording_client, {"space_id": "s", "document_id": "d", "parent_id": None}
        )
        assert envelope["success"] is True
        _, args, _ = recording_client.calls[0]
        assert args == ("s", "d", {"parent_id": None})
        assert envelope["document_details"]["parent_id"] is None

    async def test_response_without_data_key(self):
        client = RecordingClient(responses={"update_space_document": {"message": "Updated"}})
        envelope = await tools.update_space_document(
            client, {"space_id": "s", "document_id": "d", "title": "X"}
        )
        assert envelope["data"] is None
        assert envelope["message"] == "Updated"

    async def test_partial_update_round_trip(self, make_client):
        store = {"title": "Old", "content": "Body", "type": "markdown", "parent_id": "p1"}
        puts = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "PUT":
                payload = request_json(request)
                puts.append(payload)
                store.update(payload)
                return httpx.Response(200, json={"data": dict(store)})
            return httpx.Response(200, json={"data": dict(store)})

        client = make_client(handler)
        update = await tools.update_space_document(client, {"space_id": "s", "document_id": "d", "title": "X"})
        fetched = await tools.get_space_document(client, {"space_id": "s", "document_id": "d"})

        assert update["success"] is True
        assert puts == [{"title": "X"}]
        assert fetched["data"] == {"title": "X", "content": "Body", "type": "markdown", "parent_id": "p1"}


class TestDeleteDocument:
    async def test_success_details(self):
        client = RecordingClient(
            responses={"delete_space_document": {"data": {"deleted_document_name": "Guide"}}}
        )
        envelope = await tools.delete_space_document(client, {"space_id": "s", "document_id": "d"})

        details = envelope["deletion_details"]
        assert details["deleted_document_name"] == "Guide"
        assert details["document_id"] == "d"
        assert details["deleted_at"].endswith("+00:00")

    async def test_empty_body_gives_null_data(self, make_client):
        client = make_client(lambda request: httpx.Response(204))
        envelope = await tools.delete_space_document(client, {"space_id": "s", "document_id": "d"})

        assert envelope["success"] is True
        assert envelope["data"] is None
        assert envelope["message"] == "Document deleted successfully"
        assert envelope["deletion_details"]["deleted_document_name"] is None

    async def test_get_without_data_key(self):
        client = RecordingClient(responses={"get_space_document": {"id": "d"}})
        envelope = await tools.get_space_document(client, {"space_id": "s", "document_id": "d"})
        assert envelope["success"] is True
        assert envelope["data"] is None

    async def test_second_delete_surfaces_404(self, make_client):
        requests = []
        deleted = set()

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path in deleted:
                return httpx.Response(404, json={"message": "Document not found"})
            deleted.add(request.url.path)
            return httpx.Response(200, json={"data": {"deleted_document_name": "Guide"}})

        client = make_client(handler)
        first = await tools.delete_space_document(client, {"space_id": "s", "document_id": "d"})
        second = await tools.delete_space_document(client, {"space_id": "s", "document_id": "d"})

        assert first["success"] is True
        assert second["success"] is False
        assert second["status"] == 404
        assert second["error"] == "Document not found"
        assert second["hint"] == tools.HINT_DELETE
        assert len(requests) == 2


class TestGeneration:
    async def test_multi_file_requires_files(self, recording_client):
        envelope = await tools.generate_code_documentation(recording_client, {"files": []})
        assert envelope["success"] is False
        assert "No files provided" in envelope["error"]
        assert envelope["hint"] == tools.HINT_FILES
        assert recording_client.calls == []

    async def test_multi_file_rejects_incomplete_file(self, recording_client):
        envelope = await tools.generate_code_documentation(
            recording_client,
            {"files": [{"filename": "a.py", "source_code": "x = 1"}, {"filename": "b.py"}]},
        )
        assert envelope["success"] is False
        assert "files.1.source_code" in envelope["error"]
        assert recording_client.calls == []

    async def test_multi_file_forwards_files(self, recording_client):
        files = [{"filename": "a.py", "source_code": "x = 1"}, {"filename": "b.py", "source_code": "y = 2"}]
        envelope = await tools.generate_code_documentation(
            recording_client, {"files": files, "documentation_type": "API"}
        )

        assert envelope["success"] is True
        name, args, kwargs = recording_client.calls[0]
        assert name == "generate_multi_file_documentation"
        assert args == (files,)
        assert kwargs["documentation_type"] == "API"

    async def test_tests_defaults(self, recording_client):
        await tools.generate_code_tests(recording_client, {"source_code": "x = 1", "filename": "a.py"})
        _, _, kwargs = recording_client.calls[0]
        assert kwargs["test_type"] == "unit tests"
        assert kwargs["test_framework"] == "auto-detect"
        assert kwargs["additional_instructions"] == ""
        assert kwargs["name"] is None

    async def test_optimization_defaults(self, recording_client):
        await tools.generate_code_optimization(recording_client, {"source_code": "x = 1", "filename": "a.py"})
        _, _, kwargs = recording_client.calls[0]
        assert kwargs["optimization_focus"] == "Performance"

    async def test_generation_result_unwrapped(self):
        client = RecordingClient(responses={"generate_code_tests": {"data": {"tests": "def test_x(): ..."}}})
        envelope = await tools.generate_code_tests(client, {"source_code": "x = 1", "filename": "a.py"})
        assert envelope == {"success": True, "data": {"tests": "def test_x(): ..."}}


class TestGenerateAndAdd:
    ARGS = {"space_id": "s", "source_code": "x = 1", "filename": "a.py", "title": "A module"}

    async def test_generated_content_stored_as_markdown(self):
        client = RecordingClient(
            responses={
                "generate_code_documentation": {"data": {"content": "X"}},
                "create_space_document": {"data": {"id": "d1"}},
            }
        )
        envelope = await tools.generate_and_add_documentation(client, dict(self.ARGS))

        assert envelope["success"] is True
        assert [call[0] for call in client.calls] == ["generate_code_documentation", "create_space_document"]
        _, gen_args, gen_kwargs = client.calls[0]
        assert gen_args == ("x = 1", "a.py")
        assert gen_kwargs["name"] == "A module"
        _, create_args, create_kwargs = client.calls[1]
        assert create_args == ("s",)
        assert create_kwargs["content"] == "X"
        assert create_kwargs["type"] == "markdown"
        assert envelope["data"]["space_document"] == {"id": "d1"}
        assert envelope["data"]["generation"] == {"content": "X"}

    async def test_markdown_field_used(self):
        client = RecordingClient(responses={"generate_code_documentation": {"data": {"markdown": "# M"}}})
        await tools.generate_and_add_documentation(client, dict(self.ARGS))
        assert client.calls[1][2]["content"] == "# M"

    async def test_placeholder_when_no_content(self):
        client = RecordingClient(responses={"generate_code_documentation": {"data": {}}})
        await tools.generate_and_add_documentation(client, dict(self.ARGS))
        assert client.calls[1][2]["content"] == tools.GENERATED_CONTENT_PLACEHOLDER

    async def test_store_failure_is_not_rolled_back_or_retried(self):
        client = RecordingClient(
            responses={"generate_code_documentation": {"data": {"content": "X"}}},
            errors={"create_space_document": ApiError("Forbidden", 403)},
        )
        envelope = await tools.generate_and_add_documentation(client, dict(self.ARGS))

        assert envelope == {
            "success": False,
            "error": "Forbidden",
            "status": 403,
            "hint": tools.HINT_GENERATE_AND_ADD,
        }
        assert [call[0] for call in client.calls] == ["generate_code_documentation", "create_space_document"]

    async def test_generation_failure_skips_store(self):
        client = RecordingClient(errors={"generate_code_documentation": ApiError("Request timeout")})
        envelope = await tools.generate_and_add_documentation(client, dict(self.ARGS))

        assert envelope["status"] == "unknown"
        assert envelope["error"] == "Request timeout"
        assert len(client.calls) == 1


class TestAccountTools:
    async def test_list_spaces_count(self):
        client = RecordingClient(responses={"list_spaces": {"data": [{"id": 1}, {"id": 2}]}})
        envelope = await tools.list_spaces(client)
        assert envelope == {"success": True, "data": [{"id": 1}, {"id": 2}], "count": 2}

    async def test_user_info_without_data_wrapper(self):
        client = RecordingClient(responses={"get_user_info": {"name": "Ada"}})
        envelope = await tools.get_user_info(client)
        assert envelope == {"success": True, "data": {"name": "Ada"}}

    async def test_hint_is_static(self):
        client = RecordingClient(errors={"get_user_info": ApiError("Request timeout")})
        envelope = await tools.get_user_info(client)
        assert envelope["hint"] == tools.HINT_USER_INFO
        assert envelope["status"] == "unknown"

    async def test_unexpected_exception_becomes_envelope(self):
        client = RecordingClient(errors={"list_spaces": RuntimeError("kaboom")})
        envelope = await tools.list_spaces(client)
        assert envelope["success"] is False
        assert envelope["error"] == "kaboom"
        assert envelope["hint"] == tools.HINT_LIST_SPACES
