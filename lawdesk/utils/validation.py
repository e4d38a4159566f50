"""Declarative entity-level validation.

Field-level constraints (lengths, enums, bounds) live on the pydantic request
schemas. Rules that span several fields, or that must hold on the merged
record after a partial update, are declared here as ``EntityRule`` values and
checked together by ``validate_entity``. All violations are collected; nothing
stops at the first failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from lawdesk.core.errors import EntityValidationError, FieldViolation

Values = Mapping[str, Any]


@dataclass(frozen=True)
class EntityRule:
    """A named predicate over an entity's field values.

    ``check`` returns True when the values satisfy the rule. ``when`` gates the
    rule; a rule whose fields are missing is skipped.
    """

    field: str
    message: str
    check: Callable[[Values], bool]
    requires: tuple[str, ...] = ()
    when: Callable[[Values], bool] | None = None

    def applies(self, values: Values) -> bool:
        if any(values.get(name) is None for name in self.requires):
            return False
        return self.when is None or self.when(values)


def validate_entity(values: Values, rules: Iterable[EntityRule]) -> list[FieldViolation]:
    """Run every rule and return the violations found (empty list if valid)."""
    violations: list[FieldViolation] = []
    for rule in rules:
        if rule.applies(values) and not rule.check(values):
            violations.append(FieldViolation(field=rule.field, message=rule.message))
    return violations


def ensure_valid(values: Values, rules: Iterable[EntityRule]) -> None:
    """Raise EntityValidationError carrying every violation, if any."""
    violations = validate_entity(values, rules)
    if violations:
        raise EntityValidationError(violations)


def snapshot(entity: Any, fields: Iterable[str], overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Field values of ``entity`` with pending ``overrides`` merged on top."""
    values = {name: getattr(entity, name, None) for name in fields}
    if overrides:
        values.update(overrides)
    return values


def required(field: str, message: str | None = None) -> EntityRule:
    """Rule that ``field`` is present and not blank on the merged record."""
    return EntityRule(
        field=field,
        message=message or f"{field} is required",
        check=lambda values: values.get(field) not in (None, ""),
    )
