from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

LeadType = Literal["arc", "none"]


@dataclass(frozen=True)
class LeadConfig:
    """Requested lead geometry for one end of a cut.

    ``angle`` is an absolute direction in degrees that replaces the automatic
    search; ``fit`` allows the length to shrink when the full lead does not
    fit beside the material.
    """

    type: LeadType = "arc"
    length: float = 0.0
    flip_side: bool = False
    angle: Optional[float] = None
    fit: bool = True

    @property
    def enabled(self) -> bool:
        return self.type != "none" and self.length > 0.0


NO_LEAD = LeadConfig(type="none", length=0.0)
