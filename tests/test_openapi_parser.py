from pathlib import Path
from api_sdk_parser.parser.base import ParamType
from api_sdk_parser.parser.loader import load_openapi
from api_sdk_parser.parser.openapi import OpenApiParser

FIXTURES = Path(__file__).parent / "fixtures"


def _petstore():
    return OpenApiParser().parse(load_openapi(FIXTURES / "petstore.yaml"))


class TestOpenApiParser:
    def test_parse_petstore_endpoints_in_declaration_order(self):
        endpoints = _petstore()
        assert [(e.method, e.path) for e in endpoints] == [
            ("GET", "/pets"),
            ("POST", "/pets"),
            ("GET", "/pets/{petId}"),
        ]

    def test_parse_get_pets(self):
        get_pets = _petstore()[0]
        assert get_pets.name == "listPets"
        assert get_pets.collection == "pets"
        assert get_pets.description == "List all pets"
        assert len(get_pets.query_parameters) == 1
        limit = get_pets.query_parameters[0]
        assert limit.name == "limit"
        assert limit.type == ParamType.INTEGER
        assert limit.nullable is True
        assert get_pets.response == [{"id": 1, "name": "Fido"}]

    def test_parse_post_pets_body(self):
        post_pets = _petstore()[1]
        body = {p.name: p for p in post_pets.body_parameters}
        assert list(body) == ["name", "tag", "owner"]
        assert body["name"].nullable is False
        assert body["tag"].nullable is True
        assert body["owner"].type == ParamType.OBJECT
        assert post_pets.response is None

    def test_path_level_parameter_is_inherited(self):
        get_pet = _petstore()[2]
        assert get_pet.name == "Info for a specific pet"
        assert get_pet.collection is None
        assert get_pet.path_segments == ["pets", "{petId}"]
        assert [p.name for p in get_pet.path_parameters] == ["petId"]
        assert get_pet.path_parameters[0].nullable is False
        assert get_pet.path_parameters[0].description == "The id of the pet"

    def test_parse_is_idempotent(self):
        assert _petstore() == _petstore()


class TestSwagger2:
    def test_body_parameter_schema(self):
        endpoints = OpenApiParser().parse(load_openapi(FIXTURES / "swagger2.json"))
        create = endpoints[0]
        assert create.name == "createUser"
        assert create.collection == "users"
        assert [(p.name, p.nullable) for p in create.body_parameters] == [("email", False), ("age", True)]
        assert create.body_parameters[0].description == "Login email"
        assert create.response == {"id": 7, "email": "a@example.com"}

    def test_form_data_parameters(self):
        endpoints = OpenApiParser().parse(load_openapi(FIXTURES / "swagger2.json"))
        upload = endpoints[1]
        assert upload.name == "Upload avatar"
        assert upload.method == "PUT"
        assert [p.name for p in upload.body_parameters] == ["file", "caption"]
        assert upload.path_parameters[0].type == ParamType.INTEGER


class TestOperationDetails:
    def test_operation_parameter_overrides_path_level(self):
        doc = {
            "paths": {
                "/items/{id}": {
                    "parameters": [{"name": "id", "in": "path", "required": True, "description": "old"}],
                    "get": {"parameters": [{"name": "id", "in": "path", "required": True, "description": "new"}]},
                }
            }
        }
        endpoints = OpenApiParser().parse(doc)
        assert [p.description for p in endpoints[0].path_parameters] == ["new"]

    def test_nameless_parameters_are_dropped(self):
        doc = {"paths": {"/a": {"get": {"parameters": [{"in": "query"}, {"name": "", "in": "query"}, {"name": "q", "in": "query"}]}}}}
        endpoints = OpenApiParser().parse(doc)
        assert [p.name for p in endpoints[0].query_parameters] == ["q"]

    def test_non_method_keys_are_ignored(self):
        doc = {"paths": {"/a": {"summary": "x", "servers": [], "get": {}, "x-internal": {"a": 1}}}}
        endpoints = OpenApiParser().parse(doc)
        assert len(endpoints) == 1
        assert endpoints[0].name == "GET /a"
        assert endpoints[0].description == ""

    def test_untyped_body_property_is_mixed(self):
        doc = {
            "paths": {
                "/a": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/vnd.api+json": {
                                    "schema": {"properties": {"anything": {}, "flag": {"type": ["boolean", "null"]}}}
                                }
                            }
                        }
                    }
                }
            }
        }
        body = OpenApiParser().parse(doc)[0].body_parameters
        assert body[0].type == ParamType.MIXED
        assert body[1].type == ParamType.BOOLEAN
        assert body[1].nullable is True


def _single_operation(operation: dict, method: str = "post", path: str = "/things") -> dict:
    return {"paths": {path: {method: operation}}}


class TestMalformedEntries:
    def test_schema_level_required_flag_is_ignored(self):
        doc = _single_operation({
            "requestBody": {
                "content": {
                    "application/json": {
                        "schema": {"type": "object", "required": True, "properties": {"name": {"type": "string"}}}
                    }
                }
            }
        })
        body = OpenApiParser().parse(doc)[0].body_parameters
        assert [(p.name, p.nullable) for p in body] == [("name", True)]

    def test_non_string_parameter_description(self):
        doc = _single_operation(
            {"parameters": [{"name": "verbose", "in": "query", "description": True}]},
            method="get",
        )
        params = OpenApiParser().parse(doc)[0].query_parameters
        assert params[0].name == "verbose"
        assert params[0].description == ""

    def test_numeric_operation_id(self):
        endpoints = OpenApiParser().parse(_single_operation({"operationId": 404, "summary": 12}, method="get"))
        assert endpoints[0].name == "404"
        assert endpoints[0].description == "12"

    def test_tags_given_as_string(self):
        endpoints = OpenApiParser().parse(_single_operation({"tags": "users"}, method="get"))
        assert endpoints[0].collection == "users"

    def test_tags_of_unexpected_shape(self):
        endpoints = OpenApiParser().parse(_single_operation({"tags": {"name": "users"}}, method="get"))
        assert endpoints[0].collection is None

    def test_non_mapping_content_and_responses(self):
        doc = _single_operation({"requestBody": {"content": ["application/json"]}, "responses": ["200"]})
        ep = OpenApiParser().parse(doc)[0]
        assert ep.body_parameters == []
        assert ep.response is None

    def test_non_mapping_properties_and_parameters(self):
        doc = _single_operation({
            "parameters": {"name": "q"},
            "requestBody": {"content": {"application/json": {"schema": {"properties": ["a", "b"], "allOf": "x"}}}},
        })
        ep = OpenApiParser().parse(doc)[0]
        assert ep.query_parameters == []
        assert ep.body_parameters == []

    def test_non_string_schema_type(self):
        doc = _single_operation(
            {"parameters": [{"name": "q", "in": "query", "schema": {"type": {"oops": 1}}}]},
            method="get",
        )
        assert OpenApiParser().parse(doc)[0].query_parameters[0].type == ParamType.STRING

    def test_malformed_operation_does_not_stop_siblings(self):
        doc = {
            "paths": {
                "/a": {"get": {"operationId": ["bad"], "tags": 3, "responses": "oops"}},
                "/b": {"get": {"operationId": "ok"}},
                "/c": "not a path item",
            }
        }
        endpoints = OpenApiParser().parse(doc)
        assert [e.name for e in endpoints] == ["GET /a", "ok"]

    def test_paths_not_a_mapping(self):
        assert OpenApiParser().parse({"paths": ["/a"]}) == []
