from .resolver import can_view
from .resolver import compute_team
from .rules import VISIBILITY_RULES
from .rules import VisibilityMode

__all__ = ["VISIBILITY_RULES", "VisibilityMode", "can_view", "compute_team"]
