"""
Validation rule representation and composition.

Rules are declared the short way, as pipe-delimited strings or lists of
tokens, and parsed once into tagged variants:

    StaticRule("max", ("100",))          <- "max:100"
    UniqueRule(table=None)               <- "unique"          (unbound)
    UniqueRule("customers", "email")     <- "unique:customers,email"
    ExistsRule("customers", "id")        <- "exists:customers,id"

An unbound uniqueness rule is bound to the resource's own table when the
rule set is built. On update the bound rule also excludes the id being
updated, so a record never conflicts with itself.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import ClassVar, Union


@dataclass(frozen=True)
class StaticRule:
    """A constraint that only looks at the submitted value."""

    name: str
    params: tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.params:
            return f"{self.name}:{','.join(self.params)}"
        return self.name


@dataclass(frozen=True)
class UniqueRule:
    """No other row of ``table`` may hold the value in ``column``."""

    name: ClassVar[str] = "unique"

    table: str | None = None
    column: str | None = None
    exclude_id: int | None = None
    id_column: str = "id"
    without_deleted: bool = False
    deleted_column: str = "deleted_at"

    @property
    def is_bound(self) -> bool:
        return self.table is not None

    def ignore(self, entity_id: int, id_column: str = "id") -> "UniqueRule":
        """Return a copy that skips the row with the given id."""
        return replace(self, exclude_id=entity_id, id_column=id_column)


@dataclass(frozen=True)
class ExistsRule:
    """The value must be present in ``table.column``."""

    name: ClassVar[str] = "exists"

    table: str
    column: str | None = None


Rule = Union[StaticRule, UniqueRule, ExistsRule]
RULE_TYPES = (StaticRule, UniqueRule, ExistsRule)

# What a controller may declare for one field
RuleInput = Union[str, Rule, Sequence[Union[str, Rule]]]

# Static tokens and the number of parameters they take (None = one or more)
STATIC_RULES: dict[str, int | None] = {
    "required": 0,
    "nullable": 0,
    "sometimes": 0,
    "string": 0,
    "integer": 0,
    "numeric": 0,
    "boolean": 0,
    "email": 0,
    "url": 0,
    "array": 0,
    "file": 0,
    "image": 0,
    "min": 1,
    "max": 1,
    "between": 2,
    "regex": 1,
    "in": None,
    "not_in": None,
    "mimes": None,
}

# Rules whose parameters are sizes
SIZE_RULES = frozenset({"min", "max", "between"})

# Rules that must run even when the field is absent or empty
IMPLICIT_RULES = frozenset({"required"})


def _split_params(name: str, raw: str) -> tuple[str, ...]:
    if not raw:
        return ()
    if name == "regex":
        # Patterns may contain commas
        return (raw,)
    return tuple(param.strip() for param in raw.split(","))


def parse_rule(token: str) -> Rule:
    """
    Parse a single rule token into its variant.

    Raises:
        ValueError: Unknown rule name, wrong number of parameters or a
            non-numeric size parameter
    """
    name, _, raw = token.strip().partition(":")
    params = _split_params(name, raw)

    if name == "unique":
        table = params[0] if len(params) > 0 and params[0] else None
        column = params[1] if len(params) > 1 and params[1] else None
        exclude_id = None
        if len(params) > 2 and params[2] and params[2].upper() != "NULL":
            exclude_id = int(params[2])
        id_column = params[3] if len(params) > 3 and params[3] else "id"
        return UniqueRule(table=table, column=column, exclude_id=exclude_id, id_column=id_column)

    if name == "exists":
        if not params or not params[0]:
            raise ValueError("Rule 'exists' requires a table name")
        column = params[1] if len(params) > 1 and params[1] else None
        return ExistsRule(table=params[0], column=column)

    if name not in STATIC_RULES:
        raise ValueError(f"Unknown validation rule '{name}'")

    arity = STATIC_RULES[name]
    if arity is None and not params:
        raise ValueError(f"Rule '{name}' requires at least one parameter")
    if arity is not None and len(params) != arity:
        raise ValueError(f"Rule '{name}' expects {arity} parameter(s), got {len(params)}")

    if name in SIZE_RULES:
        for param in params:
            try:
                float(param)
            except ValueError:
                raise ValueError(f"Rule '{name}' expects numeric parameters, got '{param}'")

    return StaticRule(name, params)


def normalize_rules(declared: RuleInput) -> list[Rule]:
    """
    Turn a field's declared rules into an ordered list of variants.

    A single delimited string is split on ``|``; list items are parsed one by
    one and rule objects are kept as they are.
    """
    if isinstance(declared, str):
        items: Sequence[str | Rule] = [token for token in declared.split("|") if token.strip()]
    elif isinstance(declared, RULE_TYPES):
        items = [declared]
    else:
        items = list(declared)

    rules: list[Rule] = []
    for item in items:
        if isinstance(item, RULE_TYPES):
            rules.append(item)
        elif isinstance(item, str):
            rules.append(parse_rule(item))
        else:
            raise TypeError(f"Unsupported rule {item!r}")
    return rules


def compose_rules(
    global_rules: Mapping[str, RuleInput] | None,
    scoped_rules: Mapping[str, RuleInput] | None,
) -> dict[str, RuleInput]:
    """
    Merge global and operation-scoped rules.

    A field declared in both takes the scoped value as a whole; all other
    fields are kept from whichever side declares them.
    """
    merged: dict[str, RuleInput] = dict(global_rules or {})
    merged.update(scoped_rules or {})
    return merged


def bind_unique(rule: Rule, field: str, table: str, exclude_id: int | None = None) -> Rule:
    """Bind an unbound uniqueness rule to ``table.field``."""
    if isinstance(rule, UniqueRule) and not rule.is_bound:
        return replace(
            rule,
            table=table,
            column=rule.column or field,
            exclude_id=exclude_id if exclude_id is not None else rule.exclude_id,
        )
    return rule


def build_rule_set(
    rules: Mapping[str, RuleInput],
    *,
    table: str,
    exclude_id: int | None = None,
) -> dict[str, list[Rule]]:
    """
    Bind every bare ``unique`` of the composed rules to the resource table.

    Rules coming from RuleSets are already parsed and pass through as they
    are; raw declarations returned by controller rule hooks are parsed here.

    Args:
        rules: Output of compose_rules()
        table: The resource's own table
        exclude_id: Id of the row being updated (None on create)
    """
    return {
        field: [bind_unique(rule, field, table, exclude_id) for rule in normalize_rules(declared)]
        for field, declared in rules.items()
    }
