from vidshare.models.user import User
from vidshare.models.video import Video
from vidshare.models.comment import Comment
from vidshare.models.tweet import Tweet
from vidshare.models.like import Like, LikeKind, LikeTarget
from vidshare.models.subscription import Subscription
from vidshare.models.playlist import Playlist, PlaylistItem
from vidshare.models.watch_history import WatchHistoryEntry

__all__ = [
    "User",
    "Video",
    "Comment",
    "Tweet",
    "Like",
    "LikeKind",
    "LikeTarget",
    "Subscription",
    "Playlist",
    "PlaylistItem",
    "WatchHistoryEntry",
]
