"""Partial updates driven by JSON Patch (RFC 6902) documents.

The patch never touches the model directly. It is applied to the entity's
updatable-fields view in wire form, the result is validated with the update
serializer, and only a fully valid view is copied back and committed.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, List

import jsonpatch
import jsonpointer

from ..results import Outcome, Result

logger = logging.getLogger(__name__)

VALUE_OPS = {"add", "replace", "test"}
FROM_OPS = {"move", "copy"}


def _operation_error(index: int, raw: Any, detail: str) -> dict:
    error = {"operation": index, "detail": detail}
    if isinstance(raw, dict):
        error["op"] = raw.get("op")
        error["path"] = raw.get("path")
    return error


def parse_patch_document(document: Any) -> Result:
    """Check that ``document`` is a well-formed list of patch operations.

    Returns ``success`` with a list of single-operation ``JsonPatch`` objects,
    or ``invalid`` naming the first malformed operation.
    """

    if document is None:
        return Result.invalid("No patch document provided.")
    if not isinstance(document, list):
        return Result.invalid("The patch document must be a list of operations.")

    operations: List[jsonpatch.JsonPatch] = []
    for index, raw in enumerate(document):
        if not isinstance(raw, dict):
            return Result.invalid(
                f"Operation {index} is malformed.",
                errors=_operation_error(index, raw, "Operation must be an object."),
            )
        op = raw.get("op")
        if op in VALUE_OPS and "value" not in raw:
            detail = f"'{op}' requires a 'value' member."
        elif op in FROM_OPS and not isinstance(raw.get("from"), str):
            detail = f"'{op}' requires a string 'from' member."
        else:
            try:
                if op in FROM_OPS:
                    jsonpointer.JsonPointer(raw["from"])
                operations.append(jsonpatch.JsonPatch([raw]))
                continue
            except (jsonpatch.InvalidJsonPatch, jsonpointer.JsonPointerException) as exc:
                detail = str(exc)
        return Result.invalid(
            f"Operation {index} is malformed.",
            errors=_operation_error(index, raw, detail),
        )
    return Result.success(operations)


def _touched_field(pointer: str) -> str:
    return jsonpointer.JsonPointer(pointer).parts[0] if pointer else ""


def apply_operations(view: dict, document: list, operations: List[jsonpatch.JsonPatch]) -> Result:
    """Apply parsed ``operations`` in order to a copy of ``view``.

    The first failing operation aborts the whole application; ``view`` itself
    is never modified.
    """

    allowed = set(view)
    current = copy.deepcopy(view)
    for index, (raw, patch) in enumerate(zip(document, operations)):
        touched = {_touched_field(raw["path"])}
        if "from" in raw:
            touched.add(_touched_field(raw["from"]))
        unknown = sorted(touched - allowed)
        if unknown:
            return Result.validation_failed(
                _operation_error(index, raw, f"'{unknown[0]}' is not an updatable field."),
                detail=f"Operation {index} could not be applied.",
            )
        try:
            current = patch.apply(current)
        except (jsonpatch.JsonPatchException, jsonpointer.JsonPointerException) as exc:
            return Result.validation_failed(
                _operation_error(index, raw, str(exc)),
                detail=f"Operation {index} could not be applied.",
            )
        if not isinstance(current, dict):
            return Result.validation_failed(
                _operation_error(index, raw, "The patched document must stay an object."),
                detail=f"Operation {index} could not be applied.",
            )
    return Result.success(current)


def patch_entity(unit_of_work, repository, mapper, pk, document) -> Result:
    """Apply a JSON Patch ``document`` to the entity ``pk`` of ``repository``.

    All-or-nothing: on any non-success result the stored entity is unchanged.
    """

    parsed = parse_patch_document(document)
    if not parsed.succeeded:
        return parsed

    entity = repository.get(pk)
    if entity is None:
        return Result.not_found(f"{mapper.label} with ID {pk} not found.")

    update_serializer = mapper.update_serializer_class
    view = dict(update_serializer(mapper.to_update_view(entity)).data)
    applied = apply_operations(view, document, parsed.value)
    if not applied.succeeded:
        logger.info(
            "patch.rejected model=%s id=%s error=%s", mapper.label, pk, applied.errors
        )
        return applied

    serializer = update_serializer(data=applied.value)
    if not serializer.is_valid():
        logger.info(
            "patch.invalid model=%s id=%s errors=%s", mapper.label, pk, serializer.errors
        )
        return Result.validation_failed(serializer.errors)

    mapper.apply_update(serializer.validated_data, entity)
    repository.update(entity, expected_version=entity.version)
    committed = unit_of_work.complete()
    if committed.outcome is Outcome.CONFLICT:
        if not repository.any(pk):
            return Result.not_found(f"{mapper.label} with ID {pk} no longer exists.")
        return Result.conflict(
            f"{mapper.label} with ID {pk} was modified by another request."
        )
    if not committed.succeeded:
        return committed
    logger.info("patch.applied model=%s id=%s ops=%s", mapper.label, pk, len(document))
    return Result.success(entity)
