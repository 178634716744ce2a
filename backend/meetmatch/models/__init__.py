from meetmatch.models.availability_slot import AvailabilitySlot
from meetmatch.models.match_suggestion import MatchSuggestion
from meetmatch.models.meeting import Meeting
from meetmatch.models.user_block import UserBlock
from meetmatch.models.user_profile import UserProfile

__all__ = [
    "AvailabilitySlot",
    "MatchSuggestion",
    "Meeting",
    "UserBlock",
    "UserProfile",
]
