import pytest

from raml_enricher.enrich.annotations import rename_errors
from raml_enricher.enrich.base_uri import normalize_base_uri
from raml_enricher.enrich.documentation import index_documentation
from raml_enricher.enrich.schemas import decode_schemas
from raml_enricher.parser.base import Document
from raml_enricher.parser.errors import SchemaDecodeError


class TestNormalizeBaseUri:
    def test_substitutes_version(self):
        doc = Document(base_uri="http://api.example.com/{version}", version="v1")
        assert normalize_base_uri(doc).base_uri == "http://api.example.com/v1"

    def test_only_first_occurrence(self):
        doc = Document(base_uri="http://{version}.example.com/{version}", version="v2")
        assert normalize_base_uri(doc).base_uri == "http://v2.example.com/{version}"

    def test_missing_version_becomes_undefined(self):
        doc = Document(base_uri="http://api.example.com/{version}")
        assert normalize_base_uri(doc).base_uri == "http://api.example.com/undefined"

    def test_no_base_uri_is_noop(self):
        doc = Document(version="v1")
        assert normalize_base_uri(doc).base_uri is None

    def test_numeric_version_is_text(self):
        doc = Document.model_validate({"baseUri": "http://x/{version}", "version": 2})
        assert normalize_base_uri(doc).base_uri == "http://x/2"


class TestIndexDocumentation:
    def test_titles_become_ids(self):
        doc = Document.model_validate({
            "documentation": [
                {"title": "Getting Started", "content": "..."},
                {"title": "Rate limits & quotas", "content": "..."},
                {"title": "FAQ", "content": "..."},
            ],
        })
        index_documentation(doc)
        assert [s.unique_id for s in doc.documentation] == [
            "Getting-Started",
            "Rate-limits---quotas",
            "FAQ",
        ]

    def test_empty_documentation(self):
        doc = Document()
        assert index_documentation(doc).documentation == []


class TestDecodeSchemas:
    def test_decodes_each_schema(self):
        doc = Document(schemas=[{"User": '{"type":"object"}'}, {"Id": '{"type":"integer"}'}])
        decode_schemas(doc)
        assert doc.parsed_schemas == {"User": {"type": "object"}, "Id": {"type": "integer"}}

    def test_group_with_several_names(self):
        doc = Document(schemas=[{"A": "1", "B": "[true]"}])
        assert decode_schemas(doc).parsed_schemas == {"A": 1, "B": [True]}

    def test_keeps_existing_and_overwrites_duplicates(self):
        doc = Document(
            schemas=[{"User": '{"v": 1}'}, {"User": '{"v": 2}'}],
            parsed_schemas={"Legacy": {"type": "string"}, "User": {}},
        )
        decode_schemas(doc)
        assert doc.parsed_schemas == {"Legacy": {"type": "string"}, "User": {"v": 2}}

    def test_no_schemas_gives_empty_mapping(self):
        assert decode_schemas(Document()).parsed_schemas == {}

    def test_malformed_schema_names_offender(self):
        doc = Document(schemas=[{"Good": '"ok"'}, {"Bad": '{"type": '}])
        with pytest.raises(SchemaDecodeError) as exc_info:
            decode_schemas(doc)
        assert exc_info.value.name == "Bad"
        assert "Bad" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None


class TestRenameErrors:
    def test_moves_annotation(self):
        doc = Document.model_validate({"(errors)": [{"code": 404}]})
        rename_errors(doc)
        assert doc.errors == [{"code": 404}]
        assert doc.error_annotations is None

    def test_overwrites_existing_errors(self):
        doc = Document.model_validate({"(errors)": [{"code": 500}], "errors": ["old"]})
        assert rename_errors(doc).errors == [{"code": 500}]

    def test_missing_annotation_clears_errors(self):
        doc = Document.model_validate({"errors": ["old"]})
        rename_errors(doc)
        assert doc.errors is None
        assert doc.error_annotations is None
