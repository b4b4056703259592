"""Expand field rules into atomic checks with dependency edges.

Each rule yields, in order:

    EXISTS                      always
    TYPE                        if a type is declared      (needs EXISTS)
    NOT_NULL                    if the field is required   (needs EXISTS)
    ENUM / RANGE / REGEX        per declared constraint    (needs TYPE, else EXISTS)

Strict schemas get one trailing EXTRA_FIELD check scoped to the whole schema.
The result only depends on the schema, so two calls on equal schemas return
equal tuples.
"""

from __future__ import annotations

from ..schema.models import FieldRule, SchemaDefinition
from .models import SCHEMA_SCOPE, Check, CheckKind, make_check_id


def decompose(schema: SchemaDefinition) -> tuple[Check, ...]:
    """Decompose a schema definition into its ordered atomic checks."""
    checks: list[Check] = []
    for rule in schema.rules:
        checks.extend(_decompose_rule(rule))

    if schema.strict_mode:
        checks.append(
            Check(
                field=SCHEMA_SCOPE,
                kind=CheckKind.EXTRA_FIELD,
                params=(("fields", tuple(schema.field_names)),),
            )
        )
    return tuple(checks)


def _decompose_rule(rule: FieldRule) -> list[Check]:
    name = rule.field
    exists_id = make_check_id(name, CheckKind.EXISTS)
    checks = [Check(field=name, kind=CheckKind.EXISTS)]

    constraint_parent = exists_id
    if rule.declared_type is not None:
        checks.append(
            Check(
                field=name,
                kind=CheckKind.TYPE,
                prerequisites=(exists_id,),
                params=(("type", rule.declared_type),),
            )
        )
        constraint_parent = make_check_id(name, CheckKind.TYPE)

    if rule.required:
        checks.append(
            Check(field=name, kind=CheckKind.NOT_NULL, prerequisites=(exists_id,))
        )

    if rule.allowed is not None:
        checks.append(
            Check(
                field=name,
                kind=CheckKind.ENUM,
                prerequisites=(constraint_parent,),
                params=(("values", tuple(rule.allowed)),),
            )
        )
    if rule.has_range:
        checks.append(
            Check(
                field=name,
                kind=CheckKind.RANGE,
                prerequisites=(constraint_parent,),
                params=(("min", rule.minimum), ("max", rule.maximum)),
            )
        )
    if rule.pattern is not None:
        checks.append(
            Check(
                field=name,
                kind=CheckKind.REGEX,
                prerequisites=(constraint_parent,),
                params=(("pattern", rule.pattern),),
            )
        )
    return checks

