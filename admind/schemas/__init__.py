from admind.schemas.ads import AdCreate, AdStatusUpdate, AdUpdate
from admind.schemas.meetings import MeetingCreate
from admind.schemas.profiles import ProfileUpdate

__all__ = [
    "AdCreate",
    "AdStatusUpdate",
    "AdUpdate",
    "MeetingCreate",
    "ProfileUpdate",
]
