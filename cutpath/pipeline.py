"""End-to-end run: shapes -> chains -> parts -> leads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .chain_detection import ChainDetectionParameters, detect_shape_chains
from .chain_normalization import ChainNormalizationParameters, normalize_chains
from .chains import Chain, is_chain_closed
from .cut_direction import CutDirection, detect_cut_direction, set_chains_direction
from .io import chain_to_dict, lead_result_to_dict, part_to_dict, warning_to_dict
from .lead_config import NO_LEAD, LeadConfig
from .leads import LeadResult, calculate_leads
from .logging_utils import apply_debug_logging
from .part_detection import Part, PartDetectionParameters, PartDetectionWarning, detect_parts, find_part_for_chain
from .shapes import Shape
from .start_points import StartPointParameters, optimize_start_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOptions:
    detection: ChainDetectionParameters = ChainDetectionParameters()
    normalization: ChainNormalizationParameters = ChainNormalizationParameters()
    parts: PartDetectionParameters = PartDetectionParameters()
    start_points: StartPointParameters = StartPointParameters()
    optimize_start_points: bool = False
    lead_in: LeadConfig = NO_LEAD
    lead_out: LeadConfig = NO_LEAD
    # Overrides the detected winding for every closed chain when set.
    cut_direction: Optional[CutDirection] = None


@dataclass
class PipelineResult:
    chains: List[Chain]
    parts: List[Part]
    part_warnings: List[PartDetectionWarning]
    leads: Dict[str, LeadResult] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chains": [chain_to_dict(chain) for chain in self.chains],
            "parts": [part_to_dict(part) for part in self.parts],
            "warnings": [warning_to_dict(warning) for warning in self.part_warnings],
            "leads": {chain_id: lead_result_to_dict(result) for chain_id, result in self.leads.items()},
        }


def _wants_leads(options: PipelineOptions) -> bool:
    return options.lead_in.type != "none" or options.lead_out.type != "none"


def process_shapes(shapes: Sequence[Shape], options: PipelineOptions = PipelineOptions()) -> PipelineResult:
    """Run every stage over one shape list.

    Leads are computed only for closed chains, each with its detected (or
    overridden) cut direction and owning part. Open chains never get leads
    here and are absent from ``PipelineResult.leads``; callers that want them
    call :func:`cutpath.leads.calculate_leads` directly with
    ``cut_direction="none"``.
    """

    chains = detect_shape_chains(shapes, options.detection)
    chains = normalize_chains(chains, options.normalization)
    chains = set_chains_direction(chains, options.parts.closure_tolerance)
    if options.optimize_start_points:
        chains = [result.chain for result in optimize_start_points(chains, options.start_points)]

    detection = detect_parts(chains, options.parts)
    result = PipelineResult(chains=chains, parts=detection.parts, part_warnings=detection.warnings)
    if not _wants_leads(options):
        return result

    for chain in chains:
        if not is_chain_closed(chain, options.parts.closure_tolerance):
            continue
        direction = options.cut_direction or detect_cut_direction(chain, options.parts.closure_tolerance)
        part = find_part_for_chain(chain, detection.parts)
        result.leads[chain.id] = calculate_leads(chain, options.lead_in, options.lead_out, direction, part)

    failed = sum(1 for lead in result.leads.values() if lead.validation is not None and lead.validation.blocking)
    logger.info(
        "Pipeline: %d chain(s), %d part(s), leads for %d chain(s) (%d rejected by validation)",
        len(chains),
        len(detection.parts),
        len(result.leads),
        failed,
    )
    return result


apply_debug_logging(globals(), logger=logger, skip={"_wants_leads"})
