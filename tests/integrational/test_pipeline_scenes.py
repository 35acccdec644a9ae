from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest

from cutpath import LeadConfig, PipelineOptions, PipelineResult, process_shapes, shape_from_dict
from cutpath.chains import chain_end_tangent, chain_start_tangent, tessellate_chain
from cutpath.leads import sample_arc_points
from cutpath.part_detection import find_hole_for_chain, find_part_for_chain, points_inside_chain, points_inside_part


DATA_DIR = Path(__file__).resolve().parent / "scenes"
ARTIFACT_ROOT = Path("/tmp/cutpath_tests")


@dataclass
class SceneCase:
    case_id: str
    shapes: List[Any]
    options: PipelineOptions
    expect: Dict[str, Any] = field(default_factory=dict)


def _lead(length: Optional[float]) -> LeadConfig:
    if not length:
        return LeadConfig(type="none", length=0.0)
    return LeadConfig(type="arc", length=float(length))


def _iter_cases() -> Iterable[SceneCase]:
    for scene_path in sorted(DATA_DIR.glob("*.json")):
        with scene_path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"Scene {scene_path.name} must be a JSON object")
        raw_options = data.get("options", {})
        options = PipelineOptions(
            lead_in=_lead(raw_options.get("lead_in")),
            lead_out=_lead(raw_options.get("lead_out")),
            optimize_start_points=bool(raw_options.get("optimize_start_points", False)),
        )
        yield SceneCase(
            case_id=scene_path.stem,
            shapes=[shape_from_dict(item, index) for index, item in enumerate(data["shapes"])],
            options=options,
            expect=data.get("expect", {}),
        )


def _parallel(a, b, tol: float = 1e-6) -> bool:
    return abs(a[0] * b[1] - a[1] * b[0]) <= tol


def _lead_problems(result: PipelineResult, clean: bool) -> List[str]:
    problems: List[str] = []
    chains = {chain.id: chain for chain in result.chains}
    for chain_id, leads in result.leads.items():
        chain = chains[chain_id]
        part = find_part_for_chain(chain, result.parts)
        hole = find_hole_for_chain(chain, part) if part is not None else None
        pairs = (
            (leads.lead_in, chain_start_tangent(chain), "end"),
            (leads.lead_out, chain_end_tangent(chain), "start"),
        )
        for lead, tangent, side in pairs:
            if lead is None:
                continue
            arc = lead.geometry
            arc_tangent = arc.end_tangent() if side == "end" else arc.start_tangent()
            if not _parallel(arc_tangent, tangent):
                problems.append(f"{chain_id}: lead not tangent ({arc_tangent} vs {tangent})")
            if abs(arc.sweep) > math.pi / 2 + 1e-9:
                problems.append(f"{chain_id}: lead sweeps {math.degrees(abs(arc.sweep)):.1f} degrees")
            if clean and part is not None:
                samples = sample_arc_points(arc, lead.connection_point)
                if points_inside_part(samples, part).any():
                    problems.append(f"{chain_id}: lead enters material")
                if hole is not None and not points_inside_chain(samples, chain).all():
                    problems.append(f"{chain_id}: hole lead leaves its hole")
        if clean:
            problems.extend(f"{chain_id}: {w}" for w in leads.warnings if "intersects solid material" in w)
    return problems


def _write_artifacts(case: SceneCase, result: PipelineResult, problems: List[str]) -> None:
    case_dir = ARTIFACT_ROOT / case.case_id
    case_dir.mkdir(parents=True, exist_ok=True)
    (case_dir / f"{case.case_id}.report.json").write_text(
        json.dumps(result.to_dict(), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    (case_dir / f"{case.case_id}.summary.txt").write_text("\n".join(problems), encoding="utf-8")
    _render_scene_plot(case_dir / f"{case.case_id}.scene.png", result, case.case_id)


def _render_scene_plot(path: Path, result: PipelineResult, case_id: str) -> None:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    shell_ids = {part.shell.chain.id for part in result.parts}
    hole_ids = {hole.chain.id for part in result.parts for hole in part.holes}

    fig, ax = plt.subplots(figsize=(5, 5))
    for chain in result.chains:
        points = tessellate_chain(chain)
        if not points:
            continue
        if chain.id in shell_ids:
            color = "#1f77b4"
        elif chain.id in hole_ids:
            color = "orange"
        else:
            color = "red"
        ax.plot([p[0] for p in points], [p[1] for p in points], color=color, linewidth=1.0)
        ax.text(points[0][0], points[0][1], chain.id, fontsize=7, ha="left", va="bottom")
    for leads in result.leads.values():
        for lead in (leads.lead_in, leads.lead_out):
            if lead is None or lead.geometry is None:
                continue
            samples = sample_arc_points(lead.geometry)
            ax.plot(samples[:, 0], samples[:, 1], color="green", linewidth=1.5)

    ax.set_aspect("equal", adjustable="datalim")
    ax.set_title(case_id)
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.5)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)


@pytest.mark.parametrize("case", list(_iter_cases()), ids=lambda case: case.case_id)
def test_scene_pipeline(case: SceneCase) -> None:
    result = process_shapes(case.shapes, case.options)
    expect = case.expect

    problems: List[str] = []
    if "chains" in expect and len(result.chains) != expect["chains"]:
        problems.append(f"expected {expect['chains']} chains, got {len(result.chains)}")
    if "parts" in expect and len(result.parts) != expect["parts"]:
        problems.append(f"expected {expect['parts']} parts, got {len(result.parts)}")
    if "holes_per_part" in expect:
        holes = [len(part.holes) for part in result.parts]
        if holes != expect["holes_per_part"]:
            problems.append(f"expected holes {expect['holes_per_part']}, got {holes}")
    if "open_chains" in expect:
        open_count = sum(1 for w in result.part_warnings if w.kind == "open_chain")
        if open_count != expect["open_chains"]:
            problems.append(f"expected {expect['open_chains']} open chains, got {open_count}")
    for kind in expect.get("warning_kinds", []):
        if not any(w.kind == kind for w in result.part_warnings):
            problems.append(f"missing {kind} warning")
    if "lead_chains" in expect and len(result.leads) != expect["lead_chains"]:
        problems.append(f"expected leads for {expect['lead_chains']} chains, got {len(result.leads)}")

    problems.extend(_lead_problems(result, bool(expect.get("clean_leads", False))))

    if problems:
        _write_artifacts(case, result, problems)

    assert not problems, "\n".join(problems)
