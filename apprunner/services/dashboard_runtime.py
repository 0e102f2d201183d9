"""
Dashboard Runtime

Parses a dashboard's runtime configuration (actions and bindings) and
assembles the input values for prepare and action runs.

Configuration JSON accepts a few spellings per field::

    {
      "actions": [{"id": "approve", "appId": "<uuid>"}],
      "bindings": [
        {"actionId": "approve", "inputName": "Amount",
         "sourceType": "prepare_output", "sourceKey": "invoice.total"}
      ]
    }
"""

import json
from typing import Any
from uuid import UUID

from apprunner.core.exceptions import ValidationError
from apprunner.models.contracts import (
    DashboardAction,
    DashboardBinding,
    DashboardRuntimeConfig,
    RunInputValue,
)
from apprunner.models.enums import DashboardBindingSourceType

# Alternate spellings accepted for each configuration field, in priority order
ACTION_ID_KEYS = ("id", "actionId")
INPUT_NAME_KEYS = ("inputName", "appInputName", "targetInput")
SOURCE_TYPE_KEYS = ("sourceType", "bindingType")
SOURCE_KEY_KEYS = ("sourceKey", "key", "sourceInput")
LITERAL_VALUE_KEYS = ("literalValue", "value")

_KEYED_SOURCES = {
    DashboardBindingSourceType.LOAD_INPUT,
    DashboardBindingSourceType.ACTION_INPUT,
    DashboardBindingSourceType.PREPARE_OUTPUT,
}


# ==================== CONFIGURATION PARSING ====================


def _string_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)


def _first_string(node: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    """First non-blank string among ``keys``."""
    for key in keys:
        value = _string_value(node.get(key))
        if value is not None and value.strip():
            return value
    return None


def _parse_uuid(value: str, label: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {label} ID format") from None


def _parse_action(node: Any) -> DashboardAction:
    if not isinstance(node, dict):
        raise ValidationError("Dashboard action must be an object")
    action_id = _first_string(node, ACTION_ID_KEYS)
    if not action_id:
        raise ValidationError("Dashboard action is missing id")
    app_id = _first_string(node, ("appId",))
    if not app_id:
        raise ValidationError("Dashboard action is missing appId")
    return DashboardAction(id=action_id, app_id=_parse_uuid(app_id, "app"))


def _parse_binding(node: Any) -> DashboardBinding:
    if not isinstance(node, dict):
        raise ValidationError("Dashboard binding must be an object")

    input_name = _first_string(node, INPUT_NAME_KEYS)
    if not input_name:
        raise ValidationError("Dashboard binding inputName is required")

    # Nested form: {"source": {"type": ..., "key"|"input"|"path": ..., "value": ...}}
    source = node.get("source") if isinstance(node.get("source"), dict) else {}

    source_type = _first_string(node, SOURCE_TYPE_KEYS) or _first_string(source, ("type",))
    source_key = _first_string(node, SOURCE_KEY_KEYS) or _first_string(
        source, ("key", "input", "path")
    )
    literal_value = _first_string(node, LITERAL_VALUE_KEYS) or _first_string(source, ("value",))

    try:
        kind = DashboardBindingSourceType((source_type or "").strip().lower())
    except ValueError:
        raise ValidationError("Invalid dashboard binding source") from None

    if kind == DashboardBindingSourceType.PREVIOUS_ACTION_OUTPUT:
        raise ValidationError(
            "previous_action_output bindings are not supported in dashboard runtime v1"
        )
    if kind in _KEYED_SOURCES and not source_key:
        raise ValidationError("Invalid dashboard binding source")
    if kind == DashboardBindingSourceType.LITERAL and literal_value is None:
        raise ValidationError("Invalid dashboard binding source")

    app_id = _first_string(node, ("appId",))
    return DashboardBinding(
        action_id=_first_string(node, ("actionId",)),
        app_id=_parse_uuid(app_id, "app") if app_id else None,
        input_name=input_name,
        source_type=kind,
        source_key=source_key,
        literal_value=literal_value if kind == DashboardBindingSourceType.LITERAL else None,
    )


def parse_runtime_config(configuration: dict[str, Any] | str | None) -> DashboardRuntimeConfig:
    """
    Parse raw dashboard configuration.

    Raises:
        ValidationError: For invalid JSON, malformed actions or bindings,
            and duplicate action ids
    """
    if configuration is None:
        return DashboardRuntimeConfig()
    if isinstance(configuration, str):
        try:
            configuration = json.loads(configuration) if configuration.strip() else {}
        except json.JSONDecodeError as e:
            raise ValidationError(f"Dashboard configuration is invalid JSON: {e}") from None
    if not isinstance(configuration, dict):
        raise ValidationError("Dashboard configuration is invalid JSON")

    raw_actions = configuration.get("actions")
    raw_bindings = configuration.get("bindings")

    actions: list[DashboardAction] = []
    seen: set[str] = set()
    for node in raw_actions if isinstance(raw_actions, list) else []:
        if node is None:
            continue
        action = _parse_action(node)
        if action.id in seen:
            raise ValidationError(f"Duplicate dashboard action id '{action.id}'")
        seen.add(action.id)
        actions.append(action)

    bindings = [
        _parse_binding(node)
        for node in (raw_bindings if isinstance(raw_bindings, list) else [])
        if node is not None
    ]
    return DashboardRuntimeConfig(actions=actions, bindings=bindings)


# ==================== BINDING RESOLUTION ====================


def resolve_json_path(document: str, path: str) -> str | None:
    """
    Walk a dotted path through a JSON document.

    Integer segments index into arrays. Scalars come back as strings;
    objects and arrays come back as compact JSON. Returns None when the
    document is not JSON or the path does not resolve.
    """
    try:
        node: Any = json.loads(document)
    except (json.JSONDecodeError, TypeError):
        return None

    for segment in (s for s in path.split(".") if s):
        if isinstance(node, dict):
            if segment not in node or node[segment] is None:
                return None
            node = node[segment]
        elif isinstance(node, list):
            try:
                index = int(segment)
            except ValueError:
                return None
            if not 0 <= index < len(node):
                return None
            node = node[index]
        else:
            return None

    if isinstance(node, (dict, list)):
        return json.dumps(node, separators=(",", ":"))
    return _string_value(node)


def bindings_for_target(
    config: DashboardRuntimeConfig, app_id: UUID, action_id: str | None = None
) -> list[DashboardBinding]:
    """Bindings addressed to the app, or to the action when one is given."""
    return [
        b for b in config.bindings
        if (b.app_id is not None and b.app_id == app_id)
        or (action_id is not None and b.action_id == action_id)
    ]


def _lookup(values: list[RunInputValue]) -> dict[str, str]:
    return {v.title: v.value for v in values if v.title.strip()}


def resolve_binding(
    binding: DashboardBinding,
    load_inputs: dict[str, str],
    action_inputs: dict[str, str],
    prepare_response: str | None,
) -> str:
    """
    Raises:
        ValidationError: If the bound source has no value
    """
    key = binding.source_key or ""
    if binding.source_type == DashboardBindingSourceType.LOAD_INPUT:
        if key not in load_inputs:
            raise ValidationError(
                f"Missing load input '{key}' for binding '{binding.input_name}'"
            )
        return load_inputs[key]

    if binding.source_type == DashboardBindingSourceType.ACTION_INPUT:
        if key not in action_inputs:
            raise ValidationError(
                f"Missing action input '{key}' for binding '{binding.input_name}'"
            )
        return action_inputs[key]

    if binding.source_type == DashboardBindingSourceType.PREPARE_OUTPUT:
        if prepare_response is None:
            raise ValidationError(
                f"Binding '{binding.input_name}' requires prepare output '{key}'"
            )
        value = resolve_json_path(prepare_response, key)
        if value is None:
            raise ValidationError(
                f"Could not resolve prepare output path '{key}' for binding '{binding.input_name}'"
            )
        return value

    return binding.literal_value or ""


def build_run_inputs(
    config: DashboardRuntimeConfig,
    app_id: UUID,
    action_id: str | None,
    load_inputs: list[RunInputValue],
    action_inputs: list[RunInputValue],
    prepare_response: str | None,
) -> list[RunInputValue]:
    """
    Assemble input values for a dashboard-triggered run.

    Without bindings for the target, load and action inputs are merged
    (an action input wins over a load input with the same title). With
    bindings, the action inputs are kept and every binding sets (or
    replaces) its target input.
    """
    targeted = bindings_for_target(config, app_id, action_id)

    if not targeted:
        merged: dict[str, str] = {}
        for value in [*load_inputs, *action_inputs]:
            merged[value.title] = value.value
        return [RunInputValue(title=t, value=v) for t, v in merged.items()]

    load_lookup = _lookup(load_inputs)
    action_lookup = _lookup(action_inputs)

    values: dict[str, str] = dict(action_lookup)
    for binding in targeted:
        values[binding.input_name] = resolve_binding(
            binding, load_lookup, action_lookup, prepare_response
        )
    return [RunInputValue(title=t, value=v) for t, v in values.items()]
