import pytest

from cutpath import Chain, Circle, LeadConfig, Line, NO_LEAD, detect_parts, validate_lead_configuration


def _rect_chain(chain_id, x0, y0, x1, y1):
    corners = [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]
    return Chain(chain_id, tuple(Line(corners[i], corners[(i + 1) % 4]) for i in range(4)))


SHELL = _rect_chain("chain-1", 0.0, 0.0, 200.0, 200.0)
HOLE = Chain("chain-2", (Circle((100.0, 100.0), 20.0),))


def _part(*holes):
    return detect_parts([SHELL, *holes]).parts[0]


def test_clean_configuration_is_valid_info():
    result = validate_lead_configuration(SHELL, LeadConfig(length=5.0), LeadConfig(length=5.0), "clockwise")

    assert result.is_valid
    assert result.severity == "info"
    assert result.warnings == []
    assert result.suggestions is None


@pytest.mark.parametrize(
    "lead_in, message",
    [
        (LeadConfig(length=-2.0), "Lead-in length cannot be negative"),
        (LeadConfig(length=5.0, angle=360.0), "Lead-in angle must be between 0 and 359 degrees"),
        (LeadConfig(length=5.0, angle=-1.0), "Lead-in angle must be between 0 and 359 degrees"),
    ],
)
def test_errors_make_result_invalid(lead_in, message):
    result = validate_lead_configuration(SHELL, lead_in, NO_LEAD, "clockwise")

    assert not result.is_valid
    assert result.severity == "error"
    assert result.blocking
    assert message in result.warnings
    assert result.suggestions


def test_empty_chain_is_an_error():
    result = validate_lead_configuration(Chain("chain-9", ()), LeadConfig(length=1.0), NO_LEAD)

    assert result.severity == "error"
    assert result.warnings[0] == "Cannot generate leads for empty chain"


def test_none_type_with_length_warns():
    result = validate_lead_configuration(SHELL, NO_LEAD, LeadConfig(type="none", length=4.0), "clockwise")

    assert result.is_valid
    assert result.severity == "warning"
    assert 'Lead-out type is "none" but length is greater than 0' in result.warnings


def test_lead_longer_than_chain_warns():
    small = _rect_chain("chain-5", 0.0, 0.0, 2.0, 2.0)

    result = validate_lead_configuration(small, LeadConfig(length=12.0), NO_LEAD, "clockwise")

    assert "Lead-in length is very large compared to chain size" in result.warnings
    assert "Chain is very small (2.00 units) but leads are long" in result.warnings
    assert result.severity == "warning"


def test_length_extremes():
    result = validate_lead_configuration(SHELL, LeadConfig(length=150.0), LeadConfig(length=0.2), "clockwise")

    assert "Lead-in length (150) is very long" in result.warnings
    assert "Lead-out length (0.2) is very short" in result.warnings
    assert result.severity == "warning"


def test_hole_lead_is_informational():
    part = _part(HOLE)

    result = validate_lead_configuration(HOLE, LeadConfig(length=5.0), NO_LEAD, "counterclockwise", part)

    assert result.severity == "info"
    assert result.warnings == ["Generating leads for hole - leads will be placed inside the hole"]


def test_foreign_chain_is_flagged():
    stranger = _rect_chain("chain-7", 500.0, 500.0, 510.0, 510.0)

    result = validate_lead_configuration(stranger, LeadConfig(length=5.0), NO_LEAD, "clockwise", _part())

    assert "Chain is not recognized as part of the specified part" in result.warnings


def test_long_shell_lead_near_hole_edge_warns():
    edge_hole = Chain("chain-3", (Circle((20.5, 100.0), 20.0),))
    part = _part(edge_hole)

    result = validate_lead_configuration(SHELL, LeadConfig(length=60.0), NO_LEAD, "clockwise", part)

    assert "Lead may intersect with nearby hole (hole-1-1)" in result.warnings


def test_long_shell_lead_with_distant_hole_does_not_warn_about_holes():
    part = _part(HOLE)

    result = validate_lead_configuration(SHELL, LeadConfig(length=60.0), NO_LEAD, "clockwise", part)

    assert not any("nearby hole" in warning for warning in result.warnings)


def test_direction_hints():
    open_chain = Chain("chain-4", (Line((0.0, 0.0), (10.0, 0.0)),))

    closed_without = validate_lead_configuration(SHELL, LeadConfig(length=5.0), NO_LEAD, "none")
    open_with = validate_lead_configuration(open_chain, LeadConfig(length=5.0), NO_LEAD, "clockwise")
    manual = validate_lead_configuration(SHELL, LeadConfig(length=5.0, angle=45.0), NO_LEAD, "clockwise")

    assert closed_without.warnings == ['Closed chain detected but cut direction is "none"']
    assert open_with.warnings == ["Cut direction specified for open chain (not necessary)"]
    assert manual.warnings == ["Manual lead-in angle may override automatic tangency for the cut direction"]
    assert all(r.severity == "info" and r.is_valid for r in (closed_without, open_with, manual))
