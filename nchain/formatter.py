"""Coerce free-form text into a schema-shaped value with one chat round-trip."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .schema import Validation
    from .thread import Thread

logger = logging.getLogger(__name__)

FORMATTER_SYSTEM_PROMPT = [
    "You are a formatter that takes in data and a JSON like schema describing the desired output.",
    "Your task is to transform the data to match the schema.",
    "Your response is ONLY VALID JSON with no additional text.",
]

CORRECTION_PROMPT = [
    "There was an error parsing the JSON. Please fix the error and return the correct JSON.",
    "Your response is ONLY VALID JSON with no additional text.",
    "Please try again:",
]


def _schema_desc(schema: Validation[Any]) -> str:
    return getattr(schema, "desc", None) or "unknown schema"


async def format_value(thread: Thread, value: Any, schema: Validation[Any]) -> Any:
    """Ask ``thread`` to reshape ``value`` into JSON matching ``schema`` and parse it.

    A parse failure earns exactly one corrective prompt on the same thread;
    if that response fails to parse too, the error propagates.
    """
    if not isinstance(value, str):
        value = json.dumps(value)

    thread.system(FORMATTER_SYSTEM_PROMPT)
    thread.insert("schema", _schema_desc(schema))
    thread.insert("example", schema.example())
    thread.insert("value", value)
    thread.prompt(
        lambda p: p.set_label("Format")
        .section("Schema:", "{{schema}}")
        .section("Example", "{{example}}")
        .section("Transform to match schema", "{{value}}")
    )

    response = await thread.process()
    try:
        return schema.parse(response)
    except Exception as e:
        logger.debug("Formatter response did not parse, retrying once: %s", e)
        error = str(e)

    thread.prompt(
        lambda p: p.set_label("Format retry")
        .prompt(CORRECTION_PROMPT)
        .section("error", error)
        .section("response", response)
        .section("Schema", _schema_desc(schema))
        .section("Transform to match schema", "{{value}}")
    )
    return schema.parse(await thread.process())
