import datetime

import pytest

from ..exceptions import InvalidStructureError
from .testing import SCHEMA


@pytest.fixture
def target():
    from ..serializer import Serializer

    return Serializer


class TestSerialize:
    def test_without_schema(self, target):
        result = target().serialize("todos", {"id": 1, "title": "Clean the kitchen"})

        assert result == {
            "data": {
                "type": "todos",
                "id": "1",
                "attributes": {"title": "Clean the kitchen"},
            },
        }

    def test_without_schema_keeps_empty_attributes(self, target):
        assert target().serialize("todos", {"id": 1}) == {
            "data": {"type": "todos", "id": "1", "attributes": {}},
        }

    def test_with_schema(self, target):
        result = target(schema=SCHEMA).serialize(
            "todos",
            {
                "id": 1,
                "title": "Clean the kitchen",
                "user": {"id": 2, "name": "Steve"},
                "comments": [{"id": "1", "text": "Almost done..."}],
            },
        )

        assert result == {
            "data": {
                "type": "todos",
                "id": "1",
                "attributes": {"title": "Clean the kitchen"},
                "relationships": {
                    "user": {"data": {"type": "users", "id": "2"}},
                    "comments": {"data": [{"type": "comments", "id": "1"}]},
                },
            },
        }

    def test_polymorphic_relationship(self, target):
        result = target(schema=SCHEMA).serialize(
            "photos",
            {"id": 1, "name": "todo.jpg", "owner_type": "todos", "owner": {"id": 1}},
        )

        assert result == {
            "data": {
                "type": "photos",
                "id": "1",
                "attributes": {"name": "todo.jpg"},
                "relationships": {"owner": {"data": {"type": "todos", "id": "1"}}},
            },
        }

    def test_omits_read_only_fields(self, target):
        result = target(schema=SCHEMA).serialize(
            "todos", {"id": 1, "title": "Clean the kitchen", "status": "done"}
        )

        assert result == {
            "data": {
                "type": "todos",
                "id": "1",
                "attributes": {"title": "Clean the kitchen"},
            },
        }

    def test_omits_read_only_relationships(self, target):
        result = target(schema=SCHEMA).serialize("comments", {"text": "Hi", "author": {"id": 1}})

        assert result == {"data": {"type": "comments", "attributes": {"text": "Hi"}}}

    def test_field_serializer(self, target):
        schema = {
            **SCHEMA,
            "todos": {
                **SCHEMA["todos"],
                "fields": {
                    **SCHEMA["todos"]["fields"],
                    "title": {"serialize": lambda v, attrs: f"{v}{attrs['description']}"},
                },
            },
        }

        result = target(schema=schema).serialize(
            "todos", {"id": 1, "title": "foo", "description": "bar"}
        )

        assert result == {
            "data": {
                "type": "todos",
                "id": "1",
                "attributes": {"title": "foobar", "description": "bar"},
            },
        }

    def test_field_serializer_sees_read_only_fields(self, target):
        seen = []

        def serialize(value, attrs):
            seen.append(dict(attrs))
            return value

        schema = {
            "todos": {"fields": {"title": {"serialize": serialize}, "status": {"read_only": True}}}
        }
        target(schema=schema).serialize("todos", {"title": "a", "status": "done"})

        assert seen == [{"title": "a", "status": "done"}]

    def test_collection(self, target):
        result = target(schema=SCHEMA).serialize("todos", [{"id": 1}, {"id": 2, "title": "b"}])

        assert result == {
            "data": [
                {"type": "todos", "id": "1"},
                {"type": "todos", "id": "2", "attributes": {"title": "b"}},
            ],
        }

    def test_none(self, target):
        assert target().serialize("todos", None) == {"type": "todos", "data": None}

    def test_type_override(self, target):
        result = target(schema=SCHEMA).serialize(
            "todos", {"_type": "users", "id": 3, "name": "Steve", "todos": [{"id": 1}]}
        )

        assert result == {
            "data": {
                "type": "users",
                "id": "3",
                "attributes": {"name": "Steve"},
                "relationships": {"todos": {"data": [{"type": "todos", "id": "1"}]}},
            },
        }

    def test_custom_type_key(self, target):
        result = target(type_key="kind").serialize("todos", {"kind": "tasks", "id": 1})

        assert result == {"data": {"type": "tasks", "id": "1", "attributes": {}}}

    def test_relationship_override_and_bare_ids(self, target):
        result = target(schema=SCHEMA).serialize(
            "todos",
            {"user": 2, "comments": [{"_type": "notes", "id": 5}, None, "6"]},
        )

        assert result == {
            "data": {
                "type": "todos",
                "relationships": {
                    "user": {"data": {"type": "users", "id": "2"}},
                    "comments": {
                        "data": [
                            {"type": "notes", "id": "5"},
                            {"type": "comments", "id": "6"},
                        ]
                    },
                },
            },
        }

    def test_null_relationship(self, target):
        result = target(schema=SCHEMA).serialize("todos", {"id": 1, "user": None})

        assert result == {
            "data": {"type": "todos", "id": "1", "relationships": {"user": {"data": None}}},
        }

    def test_new_related_object_without_id(self, target):
        result = target(schema=SCHEMA).serialize("todos", {"user": {"name": "Steve"}})

        assert result["data"]["relationships"] == {"user": {"data": {"type": "users", "id": None}}}

    def test_none_id_is_dropped(self, target):
        assert target().serialize("todos", {"id": None, "title": "a"}) == {
            "data": {"type": "todos", "attributes": {"title": "a"}},
        }

    def test_input_is_not_mutated(self, target):
        attrs = {"_type": "todos", "id": 1, "status": "done", "user": {"id": 2}}
        target(schema=SCHEMA).serialize("todos", attrs)

        assert attrs == {"_type": "todos", "id": 1, "status": "done", "user": {"id": 2}}

    def test_invalid_structure(self, target):
        with pytest.raises(InvalidStructureError):
            target().serialize("todos", 42)

    def test_parse_relationship(self, target):
        serializer = target(schema=SCHEMA)

        assert serializer.parse_relationship("users", {"id": 2, "name": "x"}) == {
            "type": "users",
            "id": "2",
        }
        assert serializer.parse_relationship("users", {}) == {"type": "users", "id": None}
        assert serializer.parse_relationship("users", None) is None


SUCCESS = {
    "data": {
        "id": "1",
        "type": "todos",
        "attributes": {
            "title": "Clean the kitchen!",
            "created": "2020-01-01T00:00:00.000Z",
        },
        "relationships": {
            "user": {"data": {"type": "users", "id": "2"}},
        },
    },
    "included": [
        {"id": "2", "type": "users", "attributes": {"name": "Steve"}},
    ],
}


class TestDeserialize:
    def test_without_schema(self, target):
        assert target().deserialize(SUCCESS) == {
            "data": {
                "id": "1",
                "title": "Clean the kitchen!",
                "created": "2020-01-01T00:00:00.000Z",
                "user": {"id": "2", "name": "Steve"},
            },
        }

    def test_coerces_typed_attributes(self, target):
        serializer = target(schema={"todos": {"fields": {"created": {"type": "date"}}}})

        result = serializer.deserialize(SUCCESS)

        assert result["data"]["created"] == datetime.datetime(
            2020, 1, 1, tzinfo=datetime.timezone.utc
        )

    def test_polymorphic_relationship(self, target):
        result = target(schema=SCHEMA).deserialize(
            {
                "data": {
                    "id": "1",
                    "type": "photos",
                    "attributes": {"name": "photo.jpg"},
                    "relationships": {"owner": {"data": {"type": "todos", "id": "1"}}},
                },
                "included": [
                    {
                        "id": "1",
                        "type": "todos",
                        "attributes": {"title": "Clean the kitchen!", "status": "done"},
                    },
                ],
            }
        )

        assert result == {
            "data": {
                "id": "1",
                "name": "photo.jpg",
                "url": "/photos/photo.jpg",
                "owner": {"id": "1", "title": "Clean the kitchen!", "status": "DONE"},
            },
        }

    def test_document_meta(self, target):
        result = target().deserialize(
            {
                "data": {"id": "1", "type": "todos", "attributes": {"title": "a"}},
                "meta": {"total": 10, "page": 1},
                "links": {"self": "/todos/1"},
            }
        )

        assert result == {
            "data": {"id": "1", "title": "a"},
            "meta": {"total": 10, "page": 1},
            "links": {"self": "/todos/1"},
        }

    def test_resource_meta(self, target):
        meta = {"createdAt": "2023-04-26T06:00:02.000000Z"}
        result = target().deserialize(
            {"data": {"id": "1", "type": "todos", "attributes": {"title": "a"}, "meta": meta}}
        )

        assert result == {"data": {"id": "1", "title": "a", "meta": meta}}

    def test_collection(self, target):
        result = target().deserialize(
            {
                "data": [
                    {"id": "1", "type": "todos", "attributes": {"title": "a"}, "meta": {"n": 1}},
                    {"id": "2", "type": "todos", "attributes": {"title": "b"}},
                ],
                "included": [{"id": "3", "type": "users"}],
                "meta": {"total": 2},
            }
        )

        assert result == {
            "data": [
                {"id": "1", "title": "a", "meta": {"n": 1}},
                {"id": "2", "title": "b"},
            ],
            "meta": {"total": 2},
        }

    def test_empty_collection(self, target):
        assert target().deserialize({"data": []}) == {"data": []}

    def test_type_fields(self, target):
        serializer = target(
            schema={
                "todos": {
                    "type": "todos",
                    "fields": {"todo_type": "type", "status": "string", "created": "date"},
                },
            }
        )

        result = serializer.deserialize(SUCCESS)

        assert result == {
            "data": {
                "id": "1",
                "title": "Clean the kitchen!",
                "todo_type": "todos",
                "created": datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc),
                "user": {"id": "2", "name": "Steve"},
            },
        }

    def test_type_fields_with_polymorphic_schema(self, target):
        schema = {
            "todos": {
                "type": ["todos", "tests", "test-todos"],
                "fields": {"title": "string", "todo_type": "type"},
                "relationships": {"user": {"type": "users"}, "comments": {"type": "comments"}},
            },
            "users": {
                "type": "users",
                "fields": {"test": "string", "test_type": "type"},
            },
        }

        result = target(schema=schema).deserialize(
            {
                "data": {
                    "id": "1",
                    "type": "tests",
                    "attributes": {"title": "testing type"},
                    "relationships": {"user": {"data": {"id": "2", "type": "users"}}},
                },
                "included": [{"id": "2", "type": "users", "attributes": {"test": "test"}}],
            }
        )

        assert result == {
            "data": {
                "id": "1",
                "title": "testing type",
                "todo_type": "tests",
                "user": {"id": "2", "test": "test", "test_type": "users"},
            },
        }

    def test_schema_key_matches_wire_type(self, target):
        serializer = target(schema={"todo": {"type": "todos", "fields": {"done": "boolean"}}})

        document = serializer.serialize("todo", {"id": 1, "done": "false"})

        assert document["data"]["type"] == "todo"
        assert serializer.deserialize(document) == {"data": {"id": "1", "done": False}}
        assert serializer.deserialize(
            {"data": {"type": "todos", "id": "1", "attributes": {"done": "false"}}}
        ) == {"data": {"id": "1", "done": False}}

    def test_oversized_number_attribute(self, target):
        serializer = target(schema={"users": {"fields": {"age": "number"}}})

        result = serializer.deserialize(
            {"data": {"type": "users", "id": "1", "attributes": {"age": "9" * 5000}}}
        )

        assert result == {"data": {"id": "1", "age": float("inf")}}

    def test_partial_to_many_resolution(self, target):
        result = target().deserialize(
            {
                "data": {
                    "id": "1",
                    "type": "todos",
                    "relationships": {
                        "comments": {
                            "data": [
                                {"type": "comments", "id": "3"},
                                {"type": "comments", "id": "404"},
                                {"type": "comments", "id": "1"},
                            ]
                        },
                        "user": {"data": {"type": "users", "id": "404"}},
                        "tags": {"data": None},
                        "links_only": {"links": {"related": "/todos/1/links_only"}},
                    },
                },
                "included": [
                    {"id": "1", "type": "comments", "attributes": {"text": "first"}},
                    {"id": "3", "type": "comments", "attributes": {"text": "third"}},
                ],
            }
        )

        assert result == {
            "data": {
                "id": "1",
                "comments": [{"id": "3", "text": "third"}, {"id": "1", "text": "first"}],
                "user": None,
            },
        }

    def test_shared_resources_are_linked_by_identity(self, target):
        result = target().deserialize(
            {
                "data": [
                    {
                        "id": "1",
                        "type": "todos",
                        "relationships": {"user": {"data": {"type": "users", "id": 2}}},
                    },
                    {
                        "id": "2",
                        "type": "todos",
                        "relationships": {"user": {"data": {"type": "users", "id": "2"}}},
                    },
                ],
                "included": [{"id": "2", "type": "users", "attributes": {"name": "Steve"}}],
            }
        )

        first, second = result["data"]
        assert first["user"] is second["user"]
        assert first["user"] == {"id": "2", "name": "Steve"}

    def test_primary_resources_link_to_each_other(self, target):
        result = target().deserialize(
            {
                "data": [
                    {"id": "1", "type": "todos"},
                    {
                        "id": "2",
                        "type": "todos",
                        "relationships": {"parent": {"data": {"type": "todos", "id": "1"}}},
                    },
                ],
            }
        )

        assert result["data"][1]["parent"] is result["data"][0]

    def test_missing_singular_resource(self, target):
        assert target().deserialize({"data": {"type": "todos"}}) == {"data": {"id": None}}

    def test_resolve_hook_sees_raw_record(self, target):
        records = []

        def resolve(value, bag, record):
            records.append(record)
            return f"{record['type']}:{bag['id']}"

        serializer = target(schema={"todos": {"fields": {"key": {"resolve": resolve}}}})
        result = serializer.deserialize({"data": {"id": "7", "type": "todos"}})

        assert result == {"data": {"id": "7", "key": "todos:7"}}
        assert records == [{"id": "7", "type": "todos"}]

    def test_absent_fields_are_not_coerced(self, target):
        serializer = target(schema={"todos": {"fields": {"title": "string", "done": "boolean"}}})

        result = serializer.deserialize(
            {"data": {"id": "1", "type": "todos", "attributes": {"done": "false"}}}
        )

        assert result == {"data": {"id": "1", "done": False}}

    def test_idempotent_without_relationships(self, target):
        serializer = target(schema=SCHEMA)
        document = {"data": {"id": "1", "type": "todos", "attributes": {"title": "a"}}}

        assert serializer.deserialize(document) == serializer.deserialize(document)
        assert document == {"data": {"id": "1", "type": "todos", "attributes": {"title": "a"}}}

    def test_round_trip(self, target):
        serializer = target(schema={"users": {"fields": {"name": "string", "age": "number"}}})

        document = serializer.serialize("users", {"id": 5, "name": "Ann", "age": 31})

        assert serializer.deserialize(document) == {"data": {"id": "5", "name": "Ann", "age": 31}}

    def test_invalid_structure(self, target):
        with pytest.raises(InvalidStructureError):
            target().deserialize({"data": ["todos"]})


class TestDeserializeErrors:
    def test_error_string(self, target):
        assert target().deserialize({"error": "Not found"}) == {
            "error": {"status": "400", "title": "Not found", "message": "Not found"},
        }

    def test_error_string_with_status(self, target):
        assert target().deserialize({"error": "Not found", "status": 404}) == {
            "error": {"status": "404", "title": "Not found", "message": "Not found"},
        }

    def test_error_object(self, target):
        document = {"error": {"status": "500", "title": "Boom"}, "errors": []}

        assert target().deserialize(document) is document

    def test_errors(self, target):
        assert target().deserialize({"errors": [{"status": "404", "title": "Not found"}]}) == {
            "error": {"status": "404", "title": "Not found"},
        }

    def test_errors_skip_validation_failures(self, target):
        result = target().deserialize(
            {
                "errors": [
                    {"status": "422", "title": "invalid"},
                    {"status": "403", "title": "Forbidden"},
                ],
            }
        )

        assert result == {"error": {"status": "403", "title": "Forbidden"}}

    def test_only_validation_failures(self, target):
        errors = [{"status": "422", "title": "x"}, {"status": "422", "title": "y"}]

        assert target().deserialize({"errors": errors}) == {"errors": errors}

    def test_error_takes_precedence_over_data(self, target):
        result = target().deserialize({"error": "Gone", "status": 410, "data": {"type": "todos"}})

        assert result == {"error": {"status": "410", "title": "Gone", "message": "Gone"}}

    @pytest.mark.parametrize(
        "document",
        [
            {"meta": {"total": 0}},
            {"data": None, "meta": {"total": 0}},
            {},
        ],
    )
    def test_documents_without_data(self, target, document):
        assert target().deserialize(document) is document

    @pytest.mark.parametrize("document", [None, "", "OK"])
    def test_non_documents(self, target, document):
        assert target().deserialize(document) == document
