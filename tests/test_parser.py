import logging
from pathlib import Path

import pytest

from hyperroutes.errors import InvalidSchemaError, InvalidSchemaRefError, TypeRedefinitionError
from hyperroutes.parser import SchemaParser, is_json_media_type, parse_routes
from hyperroutes.routes import RouteParam, json_named_types
from hyperroutes.schema.base import Schema
from hyperroutes.schema.loader import load_schema
from hyperroutes.types import (
    JSONArray,
    JSONBoolean,
    JSONDateTime,
    JSONField,
    JSONInteger,
    JSONObject,
    JSONString,
)

FIXTURES = Path(__file__).parent / "fixtures"

SPELL = JSONObject(
    name="Spell",
    ref="#/definitions/spell",
    fields=[
        JSONField(name="all", type=JSONBoolean(ref="#/definitions/spell/definitions/all")),
        JSONField(name="element", type=JSONString(ref="#/definitions/spell/definitions/element")),
        JSONField(name="name", type=JSONString(ref="#/definitions/spell/definitions/name")),
        JSONField(name="power", type=JSONInteger(ref="#/definitions/spell/definitions/power")),
    ],
)


def _schema(data: dict) -> Schema:
    return Schema.model_validate(data)


def _redefinition_schema() -> Schema:
    # "#/definitions/spell-name" and "#/definitions/spell/definitions/name"
    # are both named SpellName.
    return _schema({
        "type": "object",
        "definitions": {
            "spell-name": {"properties": {"first": {"type": "string"}}},
            "spell": {
                "definitions": {
                    "name": {"properties": {"last": {"type": "string"}}},
                },
                "links": [
                    {"href": "/spells/names", "rel": "names", "method": "GET",
                     "targetSchema": {"$ref": "#/definitions/spell-name"}},
                    {"href": "/spells/other-names", "rel": "other", "method": "GET",
                     "targetSchema": {"$ref": "#/definitions/spell/definitions/name"}},
                ],
            },
        },
        "properties": {"spell": {"$ref": "#/definitions/spell"}},
    })


class TestParseRoutesSpells:
    def test_routes(self):
        routes = parse_routes(load_schema(FIXTURES / "spells.json"))
        assert [(r.method, r.path) for r in routes] == [
            ("POST", "/spells"),
            ("GET", "/spells"),
            ("GET", "/spells/{spell-name}"),
        ]

    def test_create_route(self):
        create = parse_routes(load_schema(FIXTURES / "spells.json"))[0]
        assert create.name == "spells"
        assert create.route_params == []
        assert create.in_type == SPELL
        assert create.out_type == SPELL
        assert create.link.rel == "create"
        assert create.link.enc_type == "application/json"
        assert create.link.media_type == "application/json"

    def test_list_route_wraps_spell(self):
        list_route = parse_routes(load_schema(FIXTURES / "spells.json"))[1]
        assert list_route.in_type is None
        assert list_route.out_type == JSONArray(name="ListSpellOut", items=SPELL)

    def test_one_route_params(self):
        one = parse_routes(load_schema(FIXTURES / "spells.json"))[2]
        assert one.name == "spells.one"
        assert one.route_params == [
            RouteParam(
                name="spell-name",
                varname="spellName",
                type=JSONString(ref="#/definitions/spell/definitions/name"),
            ),
        ]
        assert one.out_type == SPELL

    def test_deterministic(self):
        schema = load_schema(FIXTURES / "spells.json")
        first = [r.model_dump_json() for r in parse_routes(schema)]
        second = [r.model_dump_json() for r in parse_routes(schema)]
        assert first == second


class TestParseRoutesMixedParams:
    def test_params_of_each_resource(self):
        routes = parse_routes(load_schema(FIXTURES / "mixed-params.json"))
        params = {r.path: r.route_params for r in routes}
        assert [r.path for r in routes] == [
            "/locations/{location-id}",
            "/materias/{name}",
            "/spells/{spell-name}",
            "/weapons/{weapon-id}",
        ]
        assert params["/locations/{location-id}"] == [
            RouteParam(name="location-id", varname="locationId",
                       type=JSONInteger(ref="#/definitions/location/definitions/id")),
        ]
        assert params["/weapons/{weapon-id}"] == [
            RouteParam(name="weapon-id", varname="weaponId",
                       type=JSONString(ref="#/definitions/weapon/definitions/id")),
        ]

    def test_plain_var_resolves_against_resource_properties(self):
        routes = parse_routes(load_schema(FIXTURES / "mixed-params.json"))
        materia = [r for r in routes if r.name == "materias.one"][0]
        assert materia.route_params == [
            RouteParam(name="name", varname="name", type=JSONString(ref="name")),
        ]
        assert materia.out_type.name == "Materia"


class TestParseRoutesNonJSON:
    def test_binary_input(self):
        routes = parse_routes(load_schema(FIXTURES / "files.json"))
        create = [r for r in routes if r.method == "POST"][0]
        assert create.input_is_not_json is True
        assert create.in_type is None
        assert create.out_type.name == "File"
        creation_date = [f for f in create.out_type.fields if f.name == "creation_date"][0]
        assert creation_date.type == JSONDateTime(ref="#/definitions/file/definitions/creationdate")

    def test_binary_output(self):
        routes = parse_routes(load_schema(FIXTURES / "files.json"))
        one = [r for r in routes if r.path == "/files/{file-id}"][0]
        assert one.name == "files.one"
        assert one.output_is_not_json is True
        assert one.out_type is None
        assert one.link.media_type == "application/octet-stream"

    @pytest.mark.parametrize("content_type, expected", [
        ("application/json", True),
        ("application/json; charset=utf-8", True),
        ("application/vnd.api+json", True),
        ("application/octet-stream", False),
        ("text/plain", False),
    ])
    def test_is_json_media_type(self, content_type, expected):
        assert is_json_media_type(content_type) is expected


class TestParseRoutesErrors:
    def test_no_schema(self):
        with pytest.raises(InvalidSchemaError) as exc_info:
            parse_routes(None)
        assert exc_info.value.msg == "no schema provided"

    def test_root_not_object(self):
        with pytest.raises(InvalidSchemaError) as exc_info:
            parse_routes(_schema({"type": "array", "items": {}}))
        assert exc_info.value.msg == "root schema is not an object"

    def test_duplicate_rel(self):
        schema = _schema({
            "type": "object",
            "properties": {
                "spell": {
                    "links": [
                        {"href": "/spells", "rel": "list", "method": "GET"},
                        {"href": "/spells/all", "rel": "list", "method": "GET"},
                    ],
                },
            },
        })
        with pytest.raises(InvalidSchemaError) as exc_info:
            parse_routes(schema)
        assert str(exc_info.value).startswith('duplicate link "rel"')

    def test_same_rel_on_different_resources(self):
        schema = _schema({
            "type": "object",
            "properties": {
                "spell": {"links": [{"href": "/spells", "rel": "list", "method": "GET"}]},
                "weapon": {"links": [{"href": "/weapons", "rel": "list", "method": "GET"}]},
            },
        })
        assert len(parse_routes(schema)) == 2

    def test_dangling_route_param(self):
        schema = _schema({
            "type": "object",
            "properties": {
                "spell": {
                    "links": [{"href": "/spells/{(#/definitions/spell/definitions/id)}", "rel": "one", "method": "GET"}],
                },
            },
        })
        with pytest.raises(InvalidSchemaRefError):
            parse_routes(schema)

    def test_dangling_resource_ref(self):
        schema = _schema({"type": "object", "properties": {"spell": {"$ref": "#/definitions/spell"}}})
        with pytest.raises(InvalidSchemaRefError):
            parse_routes(schema)

    def test_array_without_items_in_body(self):
        schema = _schema({
            "type": "object",
            "properties": {
                "spell": {
                    "links": [{"href": "/spells", "rel": "list", "method": "GET", "targetSchema": {"type": "array"}}],
                },
            },
        })
        with pytest.raises(InvalidSchemaError):
            parse_routes(schema)

    def test_type_redefinition(self):
        with pytest.raises(TypeRedefinitionError) as exc_info:
            parse_routes(_redefinition_schema())
        err = exc_info.value
        assert err.name == "SpellName"
        assert str(err) == "type SpellName defined multiple times"
        assert err.first.ref == "#/definitions/spell-name"
        assert [t.ref for t in err.redefs] == ["#/definitions/spell/definitions/name"]


def _inline_property_schema(spell_prop: dict, weapon_prop: dict, prop_name: str) -> Schema:
    def resource(href, prop):
        return {"links": [{
            "href": href, "rel": "list", "method": "GET",
            "targetSchema": {"type": "object", "properties": {prop_name: prop}},
        }]}

    return _schema({
        "type": "object",
        "properties": {
            "spell": resource("/spells", spell_prop),
            "weapon": resource("/weapons", weapon_prop),
        },
    })


class TestParseRoutesInlineTypes:
    def test_inline_objects_are_scoped_to_their_parent(self):
        schema = _inline_property_schema(
            {"type": "object", "properties": {"power": {"type": "integer"}}},
            {"type": "object", "properties": {"weight": {"type": "number"}}},
            "meta",
        )
        spells, weapons = parse_routes(schema)
        assert spells.out_type.fields[0].type.name == "ListSpellOutMeta"
        assert weapons.out_type.fields[0].type.name == "ListWeaponOutMeta"
        names = [jt.name for jt in json_named_types([spells, weapons])]
        assert names == ["ListSpellOut", "ListSpellOutMeta", "ListWeaponOut", "ListWeaponOutMeta"]

    def test_inline_arrays_are_scoped_to_their_parent(self):
        schema = _inline_property_schema(
            {"type": "array", "items": {"type": "string"}},
            {"type": "array", "items": {"type": "integer"}},
            "tags",
        )
        spells, weapons = parse_routes(schema)
        assert spells.out_type.fields[0].type == JSONArray(name="ListSpellOutTags", items=JSONString())
        assert weapons.out_type.fields[0].type == JSONArray(name="ListWeaponOutTags", items=JSONInteger())


class TestSchemaParserState:
    def test_relative_params_are_not_registered(self, caplog):
        schema = _schema({
            "type": "object",
            "properties": {
                "spell": {
                    "properties": {"id": {"type": "string"}},
                    "links": [{"href": "/spells/{id}", "rel": "one", "method": "GET"}],
                },
                "weapon": {
                    "properties": {"id": {"type": "integer"}},
                    "links": [{"href": "/weapons/{id}", "rel": "one", "method": "GET"}],
                },
            },
        })
        parser = SchemaParser(schema)
        with caplog.at_level(logging.WARNING, logger="hyperroutes.parser"):
            spells, weapons = parser.parse_routes()
        assert spells.route_params[0].type == JSONString(ref="id")
        assert weapons.route_params[0].type == JSONInteger(ref="id")
        assert parser.type_for_ref("id") is None
        assert "redefined" not in caplog.text

    def test_parsers_do_not_share_registry(self):
        schema = load_schema(FIXTURES / "spells.json")
        a = SchemaParser(schema)
        a.parse_routes()
        b = SchemaParser(schema)
        assert a.type_for_ref("#/definitions/spell") == SPELL
        assert b.type_for_ref("#/definitions/spell") is None
