"""Building blocks of the connection reset cycle."""

from .channel_cycle import ChannelCycler, Sleep
from .escalation import ResetEscalation
from .reset_result import ResetResult
from .step_errors import RESET_STEP_ERRORS

__all__ = ["ChannelCycler", "RESET_STEP_ERRORS", "ResetEscalation", "ResetResult", "Sleep"]
