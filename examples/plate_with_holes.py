"""Example pipeline: chain a scrambled plate outline, find its holes and add leads."""

import math

from cutpath import Arc, Circle, LeadConfig, Line, PipelineOptions, process_shapes

SHAPES = [
    # outer outline, listed out of order with one edge reversed
    Line((120.0, 80.0), (0.0, 80.0), id="top"),
    Line((120.0, 0.0), (0.0, 0.0), id="bottom"),
    Line((0.0, 80.0), (0.0, 0.0), id="left"),
    Line((120.0, 0.0), (120.0, 80.0), id="right"),
    # mounting bores
    Circle((25.0, 25.0), 6.0, id="bore-1"),
    Circle((25.0, 55.0), 6.0, id="bore-2"),
    # slot
    Line((70.0, 35.0), (90.0, 35.0), id="slot-lower"),
    Arc((90.0, 40.0), 5.0, -math.pi / 2, math.pi / 2, id="slot-right"),
    Line((90.0, 45.0), (70.0, 45.0), id="slot-upper"),
    Arc((70.0, 40.0), 5.0, math.pi / 2, 3 * math.pi / 2, id="slot-left"),
]


def main() -> None:
    options = PipelineOptions(
        optimize_start_points=True,
        lead_in=LeadConfig(length=4.0),
        lead_out=LeadConfig(length=2.0),
    )
    result = process_shapes(SHAPES, options)

    print("Chains:")
    for chain in result.chains:
        direction = {True: "clockwise", False: "counterclockwise", None: "open"}[chain.clockwise]
        print(f"  {chain.id}: {[shape.id for shape in chain.shapes]} ({direction})")

    print("\nParts:")
    for part in result.parts:
        holes = ", ".join(hole.chain.id for hole in part.holes) or "none"
        print(f"  {part.id}: shell {part.shell.chain.id}, holes {holes}")

    print("\nLeads:")
    for chain_id, leads in result.leads.items():
        for label, lead in (("in", leads.lead_in), ("out", leads.lead_out)):
            if lead is None:
                continue
            arc = lead.geometry
            print(
                f"  {chain_id} lead-{label}: center=({arc.center[0]:.3f}, {arc.center[1]:.3f}) "
                f"radius={arc.radius:.3f} sweep={math.degrees(arc.sweep):.1f}"
            )
        for warning in leads.warnings:
            print(f"    warning: {warning}")

    for warning in result.part_warnings:
        print(f"warning: {warning.chain_id}: {warning.message}")


if __name__ == "__main__":
    main()
