"""Assemble resolved rules into one media-query stylesheet."""

from typing import Dict, Iterable, List, Tuple

from ..models.rule import BreakpointGroup, ResolvedRule
from ..models.token import Direction

HEADER = "/* Generated by tdb (dynamic breakpoints). Do not edit by hand. */\n"

ORDER_SCAN = "scan"
ORDER_PIXELS = "pixels"
ORDERS = (ORDER_SCAN, ORDER_PIXELS)

INDENT = "  "


def escape_selector(name: str) -> str:
    """Escape a class name for use in a CSS class selector (CSS.escape semantics)."""
    out = []
    for i, ch in enumerate(name):
        code = ord(ch)
        if code == 0:
            out.append("�")
        elif 0x01 <= code <= 0x1F or code == 0x7F:
            out.append(f"\\{code:x} ")
        elif ch.isdigit() and ch.isascii() and (i == 0 or (i == 1 and name[0] == "-")):
            out.append(f"\\{code:x} ")
        elif i == 0 and ch == "-" and len(name) == 1:
            out.append("\\-")
        elif code >= 0x80 or ch in "-_" or (ch.isascii() and ch.isalnum()):
            out.append(ch)
        else:
            out.append("\\" + ch)
    return "".join(out)


def group_rules(resolved: Iterable[ResolvedRule]) -> List[BreakpointGroup]:
    """Group resolved rules by (direction, pixels) in first-encountered order.

    Unresolved rules are dropped; a raw token appears at most once per group.
    """
    groups: Dict[Tuple[Direction, int], BreakpointGroup] = {}
    seen = set()
    for rule in resolved:
        if not rule.is_resolved or rule.token.raw_token in seen:
            continue
        seen.add(rule.token.raw_token)
        direction, pixels = rule.token.key
        group = groups.get(rule.token.key)
        if group is None:
            group = groups[rule.token.key] = BreakpointGroup(direction=direction, pixels=pixels)
        group.rules.append(rule)
    return list(groups.values())


def order_groups(groups: List[BreakpointGroup], order: str = ORDER_SCAN) -> List[BreakpointGroup]:
    """Order groups for output.

    'scan' keeps first-encountered order. 'pixels' emits max-width groups
    from widest to narrowest, then min-width groups from narrowest to widest.
    """
    if order == ORDER_SCAN:
        return list(groups)
    if order == ORDER_PIXELS:
        max_groups = sorted((g for g in groups if g.direction is Direction.MAX), key=lambda g: -g.pixels)
        min_groups = sorted((g for g in groups if g.direction is Direction.MIN), key=lambda g: g.pixels)
        return max_groups + min_groups
    raise ValueError(f"Unknown group order: {order!r} (expected one of {', '.join(ORDERS)})")


def render_rule(rule: ResolvedRule) -> str:
    selector = "." + escape_selector(rule.token.raw_token)
    lines = [f"{INDENT}{selector} {{"]
    for line in rule.declarations.strip().splitlines():
        if line.strip():
            lines.append(f"{INDENT * 2}{line.strip()}")
    lines.append(f"{INDENT}}}")
    return "\n".join(lines)


def render_group(group: BreakpointGroup) -> str:
    body = "\n".join(render_rule(rule) for rule in group.rules)
    return f"{group.media_query} {{\n{body}\n}}\n"


def assemble(resolved: Iterable[ResolvedRule], order: str = ORDER_SCAN) -> str:
    """Render the output document: a header comment and one @media block per group."""
    groups = order_groups(group_rules(resolved), order)
    if not groups:
        return HEADER
    return HEADER + "\n" + "\n".join(render_group(group) for group in groups)


def count_rules(resolved: Iterable[ResolvedRule]) -> int:
    """Number of rules assemble() emits for these resolved rules."""
    return sum(len(group.rules) for group in group_rules(resolved))
