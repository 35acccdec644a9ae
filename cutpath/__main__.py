import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from cutpath import (
    ChainDetectionParameters,
    LeadConfig,
    PartDetectionParameters,
    PipelineOptions,
    ShapeFormatError,
    load_shapes,
    process_shapes,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _lead_config(length: float, angle: Optional[float], flip: bool, fit: bool) -> LeadConfig:
    if length <= 0:
        return LeadConfig(type="none", length=0.0)
    return LeadConfig(type="arc", length=length, flip_side=flip, angle=angle, fit=fit)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Detect chains, parts and leads for a 2D shape list")
    parser.add_argument("path", help="Path to a JSON file with a list of shapes")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=ChainDetectionParameters().tolerance,
        help="Key point distance that connects two shapes (default: %(default)s)",
    )
    parser.add_argument(
        "--closure-tolerance",
        type=float,
        default=PartDetectionParameters().closure_tolerance,
        help="Gap below which a chain counts as closed (default: %(default)s)",
    )
    parser.add_argument("--lead-in", type=float, default=0.0, help="Lead-in arc length; 0 disables it")
    parser.add_argument("--lead-out", type=float, default=0.0, help="Lead-out arc length; 0 disables it")
    parser.add_argument("--lead-angle", type=float, help="Manual absolute lead angle in degrees")
    parser.add_argument("--flip-side", action="store_true", help="Place leads on the opposite side")
    parser.add_argument(
        "--no-fit",
        action="store_true",
        help="Do not shorten leads that collide with material",
    )
    parser.add_argument(
        "--cut-direction",
        choices=["clockwise", "counterclockwise", "none"],
        help="Force one cut direction instead of the detected winding",
    )
    parser.add_argument(
        "--optimize-start",
        action="store_true",
        help="Move chain start points onto the midpoint of a preferred shape",
    )
    parser.add_argument("--output", help="Write the JSON report here instead of stdout")
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        shapes = load_shapes(args.path)
    except (OSError, ShapeFormatError) as exc:
        logger.error("Failed to read %s: %s", args.path, exc)
        return 2

    fit = not args.no_fit
    options = PipelineOptions(
        detection=ChainDetectionParameters(tolerance=args.tolerance),
        parts=PartDetectionParameters(closure_tolerance=args.closure_tolerance),
        optimize_start_points=args.optimize_start,
        lead_in=_lead_config(args.lead_in, args.lead_angle, args.flip_side, fit),
        lead_out=_lead_config(args.lead_out, args.lead_angle, args.flip_side, fit),
        cut_direction=args.cut_direction,
    )
    result = process_shapes(shapes, options)
    report = json.dumps(result.to_dict(), indent=2)

    for warning in result.part_warnings:
        logger.warning("%s: %s", warning.chain_id, warning.message)

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(report, encoding="utf-8")
        logger.info("Wrote report to %s", out_path)
    else:
        print(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
