"""Resolve breakpoint tokens to CSS declarations through the CSS engine."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from ..engine.base import CssEngine
from ..models.rule import ResolvedRule
from ..models.token import BreakpointToken

logger = logging.getLogger(__name__)


def _render(utility_class: str, engine: CssEngine) -> Optional[str]:
    declarations = engine.render(utility_class)
    if declarations is None or not declarations.strip():
        return None
    return declarations


def resolve(utility_class: str, engine: CssEngine) -> Optional[str]:
    """Ask the engine for the declarations of one utility class.

    Returns None (and logs a warning) when the engine cannot resolve it.
    EngineError propagates: without the engine no rule can be resolved.
    """
    declarations = _render(utility_class, engine)
    if declarations is None:
        logger.warning(f"Warning: Could not resolve utility class '{utility_class}'. Skipping.")
    return declarations


def resolve_all(
    tokens: Iterable[BreakpointToken],
    engine: CssEngine,
    max_workers: Optional[int] = None,
) -> List[ResolvedRule]:
    """Resolve every token, keeping scan order.

    Each distinct utility class is rendered once; classes are resolved
    concurrently. A gap is warned once per raw token.
    """
    tokens = list(tokens)
    classes = list(dict.fromkeys(token.utility_class for token in tokens))

    if classes:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            rendered = list(executor.map(lambda cls: _render(cls, engine), classes))
    else:
        rendered = []
    by_class: Dict[str, Optional[str]] = dict(zip(classes, rendered))

    resolved = []
    for token in tokens:
        declarations = by_class[token.utility_class]
        if declarations is None:
            logger.warning(
                f"Warning: Could not resolve '{token.raw_token}' "
                f"(utility class '{token.utility_class}'); omitted from output."
            )
        resolved.append(ResolvedRule(token=token, declarations=declarations))
    return resolved
