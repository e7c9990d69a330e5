"""Schema - typed parse, prompt-embeddable description and example generation.

``v`` is the factory used to build schemas::

    summary = v.object({
        "title": v.string("A short headline"),
        "score": v.number("Relevance between 0 and 1"),
        "tags": v.array(v.string("A topic tag")),
    })
    summary.parse('{"title": "x", "score": "0.5", "tags": []}')

Any object exposing ``type``, ``parse`` and ``example`` (plus, optionally,
``desc`` and ``schema``) satisfies the Validation contract and can be used
wherever a Schema is expected.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Callable, Mapping
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from .errors import SchemaParseError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
M = TypeVar("M", bound=BaseModel)

EXAMPLE_STRING = "example string"
EXAMPLE_NUMBER = 42
EXAMPLE_BOOLEAN = True

# Plain ASCII decimal literals only; int() and float() also accept "1_000" and non-ASCII digits.
_NUMBER_TEXT = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


@runtime_checkable
class Validation(Protocol[T_co]):
    type: str

    def parse(self, value: Any) -> T_co: ...

    def example(self) -> Any: ...


class Schema(Generic[T]):
    def __init__(
        self,
        type: str,
        parse: Callable[[Any], T],
        example: Callable[[str], Any],
        description: str = "",
        schema: Any = None,
    ) -> None:
        self.type = type
        self.schema = schema
        self._parse = parse
        self._example = example
        self._description = description

    def __repr__(self) -> str:
        return f"Schema(type={self.type!r}, description={self._description!r})"

    @property
    def description(self) -> str:
        return self._description

    def describe(self, text: str) -> Schema[T]:
        self._description = text
        return self

    def parse(self, value: Any) -> T:
        return self._parse(value)

    def example(self) -> Any:
        return self._example(self._description)

    @property
    def desc(self) -> str:
        if self.schema is not None:
            if self.type == "array":
                return f"array of [{_desc_of(self.schema)}]"
            return _describe(self.schema)
        return f"{self.type}: {self._description}"


def _desc_of(validation: Any) -> str:
    desc = getattr(validation, "desc", None)
    return desc if desc is not None else str(getattr(validation, "type", validation))


def _describe(node: Any, indent: str = "") -> str:
    next_indent = indent + "  "
    if isinstance(node, Schema):
        if node.type == "object":
            return f"{indent} {node.description}\n{indent}{_describe(node.schema, indent)}".strip()
        if node.type == "array":
            return f"array of [{_describe(node.schema, next_indent)}]"
        return f"{node.type}: {node.description}"
    if isinstance(node, Mapping):
        entries = [f'{next_indent}"{key}": {_describe(value, next_indent)}' for key, value in node.items()]
        return "{\n" + ",\n".join(entries) + f"\n{indent}}}"
    return _desc_of(node)


def _real_value(value: Any) -> Any:
    # Nested examples come back as JSON text; decode them so they embed as JSON, not strings.
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _load_json(value: Any, expected: type, label: str) -> Any:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as e:
            raise SchemaParseError(f"Input is not a valid JSON {label}", e) from e
    if not isinstance(value, expected):
        raise SchemaParseError(f"Input is not an {label}")
    return value


def _parse_string(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if value is None:
        raise SchemaParseError("Value is null or undefined")
    if isinstance(value, (bool, dict, list)):
        return json.dumps(value)
    return str(value).strip()


def _parse_number(value: Any) -> int | float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if math.isfinite(value):
            return value
    elif isinstance(value, str):
        text = value.strip()
        if _NUMBER_TEXT.fullmatch(text):
            if text.lstrip("+-").isdigit():
                return int(text)
            number = float(text)
            if math.isfinite(number):
                return number
    raise SchemaParseError(f"Cannot convert {value!r} to a number")


def _parse_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    elif isinstance(value, (int, float)):
        return value != 0
    raise SchemaParseError(f"Cannot convert {value!r} to a boolean")


class ModelSchema(Generic[M]):
    """Validation backed by a Pydantic model."""

    type = "object"

    def __init__(self, model: type[M], description: str | None = None) -> None:
        self.model = model
        self._description = description or model.__doc__ or model.__name__

    @property
    def schema(self) -> dict[str, Any]:
        return self.model.model_json_schema()

    @property
    def desc(self) -> str:
        return f"{self._description.strip()}\n{json.dumps(self.schema, indent=2)}"

    def parse(self, value: Any) -> M:
        if isinstance(value, self.model):
            return value
        try:
            if isinstance(value, (str, bytes)):
                return self.model.model_validate_json(value)
            return self.model.model_validate(value)
        except ValidationError as e:
            raise SchemaParseError(str(e), e) from e

    def example(self) -> str:
        schema = self.schema
        return json.dumps(_example_from_json_schema(schema, schema.get("$defs", {})), indent=2)


def _example_from_json_schema(node: Mapping[str, Any], defs: Mapping[str, Any]) -> Any:
    if "$ref" in node:
        return _example_from_json_schema(defs[node["$ref"].rsplit("/", 1)[-1]], defs)
    if node.get("examples"):
        return node["examples"][0]
    if "default" in node:
        return node["default"]
    for key in ("anyOf", "oneOf", "allOf"):
        options = [o for o in node.get(key, []) if o.get("type") != "null"]
        if options:
            return _example_from_json_schema(options[0], defs)
    kind = node.get("type")
    if kind == "string":
        return EXAMPLE_STRING
    if kind in ("integer", "number"):
        return EXAMPLE_NUMBER
    if kind == "boolean":
        return EXAMPLE_BOOLEAN
    if kind == "array":
        return [_example_from_json_schema(node.get("items", {}), defs)]
    if kind == "object":
        return {
            key: _example_from_json_schema(prop, defs)
            for key, prop in node.get("properties", {}).items()
        }
    return None


class SchemaFactory:
    def string(self, description: str = "") -> Schema[str]:
        return Schema("string", _parse_string, lambda _: EXAMPLE_STRING, description)

    def number(self, description: str = "") -> Schema[int | float]:
        return Schema("number", _parse_number, lambda _: EXAMPLE_NUMBER, description)

    def boolean(self, description: str = "") -> Schema[bool]:
        return Schema("boolean", _parse_boolean, lambda _: EXAMPLE_BOOLEAN, description)

    def array(self, item: Validation[T]) -> Schema[list[T]]:
        def parse(value: Any) -> list[T]:
            return [item.parse(entry) for entry in _load_json(value, list, "array")]

        def example(_: str) -> str:
            return json.dumps([_real_value(item.example())], indent=2)

        return Schema("array", parse, example, f"[{_desc_of(item)}]", schema=item)

    def object(self, fields: Mapping[str, Validation[Any]]) -> Schema[dict[str, Any]]:
        fields = dict(fields)

        def parse(value: Any) -> dict[str, Any]:
            data = _load_json(value, dict, "object")
            result: dict[str, Any] = {}
            for key, validation in fields.items():
                if key not in data:
                    raise SchemaParseError(f"Missing required key: {key}")
                result[key] = validation.parse(data[key])
            return result

        def example(_: str) -> str:
            return json.dumps(
                {key: _real_value(validation.example()) for key, validation in fields.items()},
                indent=2,
            )

        return Schema("object", parse, example, "Object", schema=fields)

    def model(self, model: type[M], description: str | None = None) -> ModelSchema[M]:
        return ModelSchema(model, description)


v = SchemaFactory()
