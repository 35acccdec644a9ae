from .geometry import BoundingBox, point_in_polygon, points_in_polygon, signed_area
from .shapes import (
    Arc,
    Circle,
    Ellipse,
    Line,
    Polyline,
    PolylineVertex,
    Shape,
    TessellationParameters,
    UnsupportedShapeError,
    bulge_to_arc,
)
from .chains import Chain, chain_bounding_box, chain_end_point, chain_start_point, is_chain_closed
from .chain_detection import ChainDetectionParameters, UnionFind, detect_shape_chains
from .chain_normalization import (
    ChainNormalizationParameters,
    ChainTraversalReport,
    TraversalIssue,
    analyze_chain_traversal,
    normalize_chain,
    normalize_chains,
)
from .cut_direction import CutDirection, detect_cut_direction, set_chain_direction, set_chains_direction
from .part_detection import (
    Part,
    PartDetectionParameters,
    PartDetectionResult,
    PartDetectionWarning,
    PartHole,
    PartShell,
    detect_parts,
    find_part_for_chain,
    is_chain_hole_in_part,
    is_chain_shell_in_part,
    is_point_inside_part,
)
from .lead_config import LeadConfig, LeadType, NO_LEAD
from .lead_validation import LeadValidationResult, validate_lead_configuration
from .leads import (
    CutNormal,
    Lead,
    LeadResult,
    calculate_cut_normal,
    calculate_leads,
    create_tangent_arc,
    sample_arc_points,
)
from .start_points import (
    StartPointOptimizationResult,
    StartPointParameters,
    find_best_shape_to_split,
    optimize_chain_start_point,
    optimize_start_points,
)
from .io import ShapeFormatError, dump_shapes, load_shapes, shape_from_dict, shape_to_dict, shapes_from_json
from .pipeline import PipelineOptions, PipelineResult, process_shapes

__all__ = [
    'BoundingBox',
    'point_in_polygon',
    'points_in_polygon',
    'signed_area',
    'Arc',
    'Circle',
    'Ellipse',
    'Line',
    'Polyline',
    'PolylineVertex',
    'Shape',
    'TessellationParameters',
    'UnsupportedShapeError',
    'bulge_to_arc',
    'Chain',
    'chain_bounding_box',
    'chain_end_point',
    'chain_start_point',
    'is_chain_closed',
    'ChainDetectionParameters',
    'UnionFind',
    'detect_shape_chains',
    'ChainNormalizationParameters',
    'ChainTraversalReport',
    'TraversalIssue',
    'analyze_chain_traversal',
    'normalize_chain',
    'normalize_chains',
    'CutDirection',
    'detect_cut_direction',
    'set_chain_direction',
    'set_chains_direction',
    'Part',
    'PartDetectionParameters',
    'PartDetectionResult',
    'PartDetectionWarning',
    'PartHole',
    'PartShell',
    'detect_parts',
    'find_part_for_chain',
    'is_chain_hole_in_part',
    'is_chain_shell_in_part',
    'is_point_inside_part',
    'LeadConfig',
    'LeadType',
    'NO_LEAD',
    'LeadValidationResult',
    'validate_lead_configuration',
    'CutNormal',
    'Lead',
    'LeadResult',
    'calculate_cut_normal',
    'calculate_leads',
    'create_tangent_arc',
    'sample_arc_points',
    'StartPointOptimizationResult',
    'StartPointParameters',
    'find_best_shape_to_split',
    'optimize_chain_start_point',
    'optimize_start_points',
    'ShapeFormatError',
    'dump_shapes',
    'load_shapes',
    'shape_from_dict',
    'shape_to_dict',
    'shapes_from_json',
    'PipelineOptions',
    'PipelineResult',
    'process_shapes',
]
