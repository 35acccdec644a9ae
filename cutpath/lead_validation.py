"""Lead configuration checks that run before any geometry is built."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple

from .chains import Chain, chain_bounding_box, is_chain_closed
from .constants import MAX_RECOMMENDED_LEAD_LENGTH, MIN_LEAD_LENGTH
from .cut_direction import CutDirection
from .lead_config import LeadConfig
from .logging_utils import apply_debug_logging
from .part_detection import Part, is_chain_hole_in_part, is_chain_shell_in_part

logger = logging.getLogger(__name__)

Severity = Literal["info", "warning", "error"]

_SEVERITY_RANK = {"info": 0, "warning": 1, "error": 2}

_LARGE_LEAD_RATIO = 2.0
_SMALL_CHAIN_SIZE = 3.0
_SMALL_CHAIN_MAX_LEAD = 10.0
_HOLE_PROXIMITY = 1.0
_HOLE_PROXIMITY_LEAD = 50.0


@dataclass
class LeadValidationResult:
    is_valid: bool
    severity: Severity
    warnings: List[str] = field(default_factory=list)
    suggestions: Optional[List[str]] = None

    @property
    def blocking(self) -> bool:
        return not self.is_valid and self.severity == "error"


class _Collector:
    def __init__(self) -> None:
        self.severity: Severity = "info"
        self.warnings: List[str] = []
        self.suggestions: List[str] = []

    def add(self, severity: Severity, warning: str, suggestion: Optional[str] = None) -> None:
        self.warnings.append(warning)
        if suggestion:
            self.suggestions.append(suggestion)
        if _SEVERITY_RANK[severity] > _SEVERITY_RANK[self.severity]:
            self.severity = severity

    def result(self) -> LeadValidationResult:
        return LeadValidationResult(
            is_valid=self.severity != "error",
            severity=self.severity,
            warnings=self.warnings,
            suggestions=self.suggestions or None,
        )


def _named(lead_in: LeadConfig, lead_out: LeadConfig) -> Tuple[Tuple[str, LeadConfig], ...]:
    return (("Lead-in", lead_in), ("Lead-out", lead_out))


def _check_basic(out: _Collector, lead_in: LeadConfig, lead_out: LeadConfig) -> None:
    for name, config in _named(lead_in, lead_out):
        if config.length < 0:
            out.add("error", f"{name} length cannot be negative", f"Set {name.lower()} length to 0 or a positive value")
        if config.type == "none" and config.length > 0:
            out.add(
                "warning",
                f'{name} type is "none" but length is greater than 0',
                f'Set {name.lower()} length to 0 or change its type to "arc"',
            )
        if config.angle is not None and not (0 <= config.angle < 360):
            out.add(
                "error",
                f"{name} angle must be between 0 and 359 degrees",
                f"Set {name.lower()} angle to a value in [0, 360)",
            )


def _check_chain(out: _Collector, chain: Chain, lead_in: LeadConfig, lead_out: LeadConfig) -> None:
    if chain.is_empty:
        out.add("error", "Cannot generate leads for empty chain", "Ensure the chain contains at least one shape")
        return
    box = chain_bounding_box(chain)
    size = box.size if box is not None else 0.0
    for name, config in _named(lead_in, lead_out):
        if config.length > size * _LARGE_LEAD_RATIO:
            out.add(
                "warning",
                f"{name} length is very large compared to chain size",
                f"Consider reducing {name.lower()} length to below {size * _LARGE_LEAD_RATIO:.2f}",
            )
    longest = max(lead_in.length, lead_out.length)
    if size < _SMALL_CHAIN_SIZE and longest > _SMALL_CHAIN_MAX_LEAD:
        out.add(
            "warning",
            f"Chain is very small ({size:.2f} units) but leads are long",
            "Consider using shorter leads for small geometry",
        )


def _check_part(out: _Collector, chain: Chain, lead_in: LeadConfig, lead_out: LeadConfig, part: Part) -> None:
    is_shell = is_chain_shell_in_part(chain, part)
    is_hole = is_chain_hole_in_part(chain, part)
    if not is_shell and not is_hole:
        out.add(
            "warning",
            "Chain is not recognized as part of the specified part",
            "Verify that the chain belongs to the correct part",
        )
        return
    longest = max(lead_in.length, lead_out.length)
    if is_shell and longest > _HOLE_PROXIMITY_LEAD:
        for hole in part.holes:
            if part.shell.bounding_box.edge_clearance(hole.bounding_box) < _HOLE_PROXIMITY:
                out.add(
                    "warning",
                    f"Lead may intersect with nearby hole ({hole.id})",
                    "Consider reducing lead length or adjusting the lead angle",
                )
    if is_hole:
        out.add("info", "Generating leads for hole - leads will be placed inside the hole")


def _check_lengths(out: _Collector, lead_in: LeadConfig, lead_out: LeadConfig) -> None:
    for name, config in _named(lead_in, lead_out):
        if config.length > MAX_RECOMMENDED_LEAD_LENGTH:
            out.add(
                "warning",
                f"{name} length ({config.length:g}) is very long",
                f"Consider a {name.lower()} length below {MAX_RECOMMENDED_LEAD_LENGTH:g} units",
            )
        if config.type != "none" and 0 < config.length < MIN_LEAD_LENGTH:
            out.add(
                "info",
                f"{name} length ({config.length:g}) is very short",
                f"{name} lengths below {MIN_LEAD_LENGTH:g} units may not be effective",
            )


def _check_direction(
    out: _Collector,
    chain: Chain,
    lead_in: LeadConfig,
    lead_out: LeadConfig,
    cut_direction: CutDirection,
) -> None:
    closed = is_chain_closed(chain)
    if closed and cut_direction == "none":
        out.add(
            "info",
            'Closed chain detected but cut direction is "none"',
            "Set a cut direction so leads can curve away from the material",
        )
    if not closed and not chain.is_empty and cut_direction != "none":
        out.add(
            "info",
            "Cut direction specified for open chain (not necessary)",
            'Cut direction "none" is sufficient for open chains',
        )
    if cut_direction != "none":
        for name, config in _named(lead_in, lead_out):
            if config.type == "arc" and config.angle is not None:
                out.add(
                    "info",
                    f"Manual {name.lower()} angle may override automatic tangency for the cut direction",
                    "Clear the manual angle to let leads follow the cut direction",
                )


def validate_lead_configuration(
    chain: Chain,
    lead_in: LeadConfig,
    lead_out: LeadConfig,
    cut_direction: CutDirection = "none",
    part: Optional[Part] = None,
) -> LeadValidationResult:
    """Check a lead configuration without computing geometry.

    Errors (negative lengths, out-of-range manual angles, empty chains) make
    the result invalid. Everything else is reported as warning or info.
    """

    out = _Collector()
    _check_basic(out, lead_in, lead_out)
    _check_chain(out, chain, lead_in, lead_out)
    if part is not None and not chain.is_empty:
        _check_part(out, chain, lead_in, lead_out, part)
    _check_lengths(out, lead_in, lead_out)
    _check_direction(out, chain, lead_in, lead_out, cut_direction)
    result = out.result()
    if result.warnings:
        logger.debug("Lead validation for %s: %s %s", chain.id, result.severity, result.warnings)
    return result


apply_debug_logging(globals(), logger=logger, skip={"_named"})
