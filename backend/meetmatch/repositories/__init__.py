from meetmatch.repositories.meeting_repository import MeetingRepository
from meetmatch.repositories.slot_repository import SlotRepository

__all__ = ["MeetingRepository", "SlotRepository"]
