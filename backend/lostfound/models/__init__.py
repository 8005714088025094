from .user import User
from .lost_item import LostItem
from .found_item import FoundItem
from .match import Match
from .notification import Notification
from .match_run import MatchRun
from .run_lease import RunLease

__all__ = ["User", "LostItem", "FoundItem", "Match", "Notification", "MatchRun", "RunLease"]
