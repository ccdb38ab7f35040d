"""feedline: feed aggregation engine and live update contracts."""

from .config import (
    DisplayConfig,
    LiveConfig,
    RuntimeConfig,
    config_to_dict,
    default_config,
    init_default_config,
    load_runtime_config,
    resolve_config_path,
)
from .live import FeedStore, IdSetTrigger
from .models import (
    ContactRef,
    ContactRequestPayload,
    ContactRequestRef,
    Discussion,
    DiscussionResponse,
    FeedPayload,
    FeedQuery,
    FeedRecord,
    GroupRef,
    InviteLinkRef,
    Mention,
    MentionPayload,
    Message,
    PostPayload,
    RecordPayload,
    RefType,
    Separator,
    SeparatorKind,
    UserRef,
)
from .pipeline import (
    build_active_feed,
    build_main_feed,
    build_post_feed,
    build_search_feed,
    to_full_feed,
    to_sorted_active_feed_items,
    to_sorted_feed_items,
    to_sorted_post_feed_items,
    to_sorted_search_feed_items,
)

__all__ = [
    "ContactRef",
    "ContactRequestPayload",
    "ContactRequestRef",
    "Discussion",
    "DiscussionResponse",
    "DisplayConfig",
    "FeedPayload",
    "FeedQuery",
    "FeedRecord",
    "FeedStore",
    "GroupRef",
    "IdSetTrigger",
    "InviteLinkRef",
    "LiveConfig",
    "Mention",
    "MentionPayload",
    "Message",
    "PostPayload",
    "RecordPayload",
    "RefType",
    "RuntimeConfig",
    "Separator",
    "SeparatorKind",
    "UserRef",
    "build_active_feed",
    "build_main_feed",
    "build_post_feed",
    "build_search_feed",
    "config_to_dict",
    "default_config",
    "init_default_config",
    "load_runtime_config",
    "resolve_config_path",
    "to_full_feed",
    "to_sorted_active_feed_items",
    "to_sorted_feed_items",
    "to_sorted_post_feed_items",
    "to_sorted_search_feed_items",
]

__version__ = "0.1.0"
