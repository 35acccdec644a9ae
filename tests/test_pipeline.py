from cutpath import (
    Chain,
    Circle,
    LeadConfig,
    Line,
    PipelineOptions,
    Polyline,
    calculate_leads,
    chain_end_point,
    chain_start_point,
    detect_cut_direction,
    is_chain_closed,
    process_shapes,
)


def _square(size=40.0):
    corners = [(0.0, 0.0), (size, 0.0), (size, size), (0.0, size)]
    return [Line(corners[i], corners[(i + 1) % 4], id=f"side-{i}") for i in range(4)]


def test_empty_polyline_passes_through_as_open_chain():
    empty = Polyline((), id="empty")

    result = process_shapes([empty], PipelineOptions(lead_in=LeadConfig(length=2.0)))

    assert [len(chain.shapes) for chain in result.chains] == [1]
    assert result.parts == []
    assert result.leads == {}
    kinds = [w.kind for w in result.part_warnings]
    assert kinds == ["open_chain", "no_parts"]
    assert result.to_dict()["chains"][0]["shapes"][0]["geometry"]["vertices"] == []


def test_empty_polyline_has_no_endpoints():
    chain = Chain("chain-1", (Polyline((), closed=True),))

    assert Polyline(()).start_point() is None
    assert Polyline(()).end_point() is None
    assert chain_start_point(chain) is None
    assert chain_end_point(chain) is None
    assert not is_chain_closed(chain)
    assert detect_cut_direction(chain) == "none"


def test_empty_polyline_beside_a_closed_shape():
    shapes = _square() + [Polyline((), id="empty")]

    result = process_shapes(shapes)

    assert len(result.parts) == 1
    assert [chain.id for chain in result.chains] == ["chain-1", "chain-2"]
    assert [(w.kind, w.chain_id) for w in result.part_warnings] == [("open_chain", "chain-2")]


def test_open_chains_get_no_leads_from_the_pipeline():
    slot = [
        Line((100.0, 0.0), (120.0, 0.0), id="slot-a"),
        Line((120.0, 0.0), (120.0, 10.0), id="slot-b"),
    ]
    shapes = _square() + slot + [Circle((20.0, 20.0), 5.0, id="bore")]
    config = LeadConfig(length=3.0)

    result = process_shapes(shapes, PipelineOptions(lead_in=config, lead_out=config))

    open_ids = [w.chain_id for w in result.part_warnings if w.kind == "open_chain"]
    assert len(open_ids) == 1
    assert open_ids[0] not in result.leads
    assert set(result.leads) == {chain.id for chain in result.chains} - set(open_ids)

    open_chain = next(chain for chain in result.chains if chain.id == open_ids[0])
    direct = calculate_leads(open_chain, config, config, "none")
    assert direct.lead_in is not None and direct.lead_out is not None
