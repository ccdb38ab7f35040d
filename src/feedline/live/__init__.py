"""Live update contracts: channels, membership policy and the record store."""

from .channels import Channel, KeyedChannel, ListenerId
from .policy import IdSetTrigger, discussion_membership_changed, record_membership_changed
from .store import FeedStore, new_record_ids

__all__ = [
    "Channel",
    "FeedStore",
    "IdSetTrigger",
    "KeyedChannel",
    "ListenerId",
    "discussion_membership_changed",
    "new_record_ids",
    "record_membership_changed",
]
