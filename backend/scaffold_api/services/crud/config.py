"""
Per-controller configuration.

Usage:
    CUSTOMER_CONTROLLER = ControllerConfig(
        view="admin.customers",
        list_options=ListOptions(paginate=True, items_per_page=20),
        return_on=ReturnOn(store=ResponseShape.ALL_RECORDS),
        rules=RuleSets(
            all={"name": "required|string|max:100"},
            store={"email": "required|email|unique"},
            update={"email": "required|email|unique"},
        ),
    )

A ``return_on`` entry left as None falls back to the process-wide default
(settings.return_on_store / settings.return_on_update), resolved once when
the controller is built.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from scaffold_shared.config.settings import Settings, settings as default_settings

from .rules import Rule, RuleInput, normalize_rules


class ResponseShape(str, Enum):
    """What a successful store/update sends back."""

    SINGLE_RECORD = "single-record"
    ALL_RECORDS = "all-records"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class ReturnOn:
    """Response-shape policy for store and update."""

    store: ResponseShape | None = None
    update: ResponseShape | None = None

    def __post_init__(self) -> None:
        # Accept the plain string values as well
        for name in ("store", "update"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, ResponseShape):
                object.__setattr__(self, name, ResponseShape(value))

    def resolve(self, defaults: "ReturnOn") -> "ReturnOn":
        """Fill unset entries from ``defaults``."""
        return ReturnOn(
            store=self.store or defaults.store or ResponseShape.SINGLE_RECORD,
            update=self.update or defaults.update or ResponseShape.SINGLE_RECORD,
        )


def default_return_on(settings: Settings | None = None) -> ReturnOn:
    """Process-wide response-shape defaults from settings."""
    settings = settings or default_settings
    return ReturnOn(store=settings.return_on_store, update=settings.return_on_update)


@dataclass(frozen=True)
class ListOptions:
    """Static options merged into every listing request."""

    select: tuple[str, ...] = ()
    paginate: bool | None = None
    items_per_page: int | None = None

    def as_dict(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.select:
            options["select"] = list(self.select)
        if self.paginate is not None:
            options["paginate"] = self.paginate
        if self.items_per_page is not None:
            options["items_per_page"] = self.items_per_page
        return options


def _parsed(rules: Mapping[str, RuleInput] | None) -> Mapping[str, tuple[Rule, ...]]:
    return MappingProxyType({name: tuple(normalize_rules(declared)) for name, declared in (rules or {}).items()})


@dataclass(frozen=True)
class RuleSets:
    """
    Validation rules keyed by scope: all operations, store only, update only.

    Declared rules are parsed here, so an unknown token or a bad parameter
    fails when the configuration is built.
    """

    all: Mapping[str, RuleInput] = field(default_factory=dict)
    store: Mapping[str, RuleInput] = field(default_factory=dict)
    update: Mapping[str, RuleInput] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("all", "store", "update"):
            object.__setattr__(self, name, _parsed(getattr(self, name)))


@dataclass(frozen=True)
class ControllerConfig:
    """Settings of one resource controller, read-only after construction."""

    view: str = ""
    list_options: ListOptions = field(default_factory=ListOptions)
    return_on: ReturnOn = field(default_factory=ReturnOn)
    rules: RuleSets = field(default_factory=RuleSets)
