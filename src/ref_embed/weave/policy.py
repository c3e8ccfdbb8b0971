"""Fold ordered directives into one embedding policy."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable

from ref_embed.weave.models import (
    ConfigDirective,
    Directive,
    EmbedPolicy,
    ExcludeDirective,
    IncludeAllDirective,
    IncludeDirective,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_PREFIX = "ReferenceEmbed"


class _ModeSlot:
    """Set-once holder for the inclusion mode."""

    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value: bool | None = None

    def fix(self, exclude_mode: bool) -> bool:
        if self.value is None:
            self.value = exclude_mode
        return self.value


def resolve_policy(
    directives: Iterable[Directive],
    default_prefix: str = DEFAULT_PREFIX,
    logger: logging.Logger | None = None,
) -> EmbedPolicy:
    """Apply directives in stored order; the first mode-fixing directive decides the mode."""

    effective_logger = logger or LOGGER
    prefix = default_prefix
    default_compression = False
    mode = _ModeSlot()
    filter_set: set[str] = set()
    overrides: dict[str, bool] = {}

    for directive in directives:
        if isinstance(directive, ConfigDirective):
            if directive.default_compress:
                default_compression = True
            if directive.prefix is not None:
                prefix = directive.prefix
        elif isinstance(directive, IncludeAllDirective):
            mode.fix(True)
        elif isinstance(directive, IncludeDirective):
            if mode.fix(False):
                filter_set.discard(directive.name)
            else:
                filter_set.add(directive.name)
            if directive.compress is not None:
                overrides[directive.name] = directive.compress
        elif isinstance(directive, ExcludeDirective):
            if mode.fix(True):
                filter_set.add(directive.name)
            else:
                filter_set.discard(directive.name)
        else:
            raise TypeError(f"unsupported directive: {directive!r}")

    policy = EmbedPolicy(
        prefix=prefix + ".",
        filter_set=frozenset(filter_set),
        exclude_mode=bool(mode.value),
        default_compression=default_compression,
        compression_overrides=MappingProxyType(overrides),
    )
    effective_logger.info(
        "policy.resolved prefix=%s exclude_mode=%s filter=%s default_compression=%s overrides=%s",
        policy.prefix,
        policy.exclude_mode,
        sorted(policy.filter_set),
        policy.default_compression,
        dict(sorted(overrides.items())),
    )
    return policy
