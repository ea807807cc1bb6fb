import json
from pathlib import Path
from typing import Any, Dict, Literal

import jsonschema

SchemaType = Literal["action_event", "action_state"]


def _load_schema(name: str) -> Dict[str, Any]:
    schema_path = Path(__file__).with_name(f"{name}.schema.json")
    with schema_path.open("r", encoding="utf-8") as f:
        return json.load(f)["schema"]


_compiled_schemas = {
    "action_event": jsonschema.Draft7Validator(_load_schema("action_event")),
    "action_state": jsonschema.Draft7Validator(_load_schema("action_state")),
}


def validate_against_schema(schema_type: SchemaType, data: Any) -> Dict[str, Any]:
    validator = _compiled_schemas[schema_type]
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(part) for part in e.path])
    if not errors:
        return {"valid": True}
    return {"valid": False, "errors": [f"{'/'.join(map(str, err.path))} {err.message}".strip() for err in errors]}
