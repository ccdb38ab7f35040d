"""Pure feed aggregation stages and the views composed from them."""

from .dedup import dedup_records
from .filter import discussion_in_query, filter_discussions, filter_records, record_in_query
from .seen import (
    is_created_seen,
    is_latest_seen,
    is_mention_seen,
    is_record_seen,
    preserve_unseen,
)
from .separators import (
    NEW_SEPARATOR,
    SEEN_SEPARATOR,
    annotate_dates,
    date_separator,
    last_unseen_index,
    render_date_text,
    to_full_feed,
)
from .sort import sort_by_created_at_desc, sort_by_ts_desc
from .views import (
    build_active_feed,
    build_main_feed,
    build_post_feed,
    build_search_feed,
    contact_request_to_payload,
    post_to_active_payload,
    post_to_all_posts_payload,
    post_to_search_payload,
    record_to_payload,
    to_sorted_active_feed_items,
    to_sorted_feed_items,
    to_sorted_post_feed_items,
    to_sorted_search_feed_items,
)

__all__ = [
    "NEW_SEPARATOR",
    "SEEN_SEPARATOR",
    "annotate_dates",
    "build_active_feed",
    "build_main_feed",
    "build_post_feed",
    "build_search_feed",
    "contact_request_to_payload",
    "date_separator",
    "dedup_records",
    "discussion_in_query",
    "filter_discussions",
    "filter_records",
    "is_created_seen",
    "is_latest_seen",
    "is_mention_seen",
    "is_record_seen",
    "last_unseen_index",
    "post_to_active_payload",
    "post_to_all_posts_payload",
    "post_to_search_payload",
    "preserve_unseen",
    "record_in_query",
    "record_to_payload",
    "render_date_text",
    "sort_by_created_at_desc",
    "sort_by_ts_desc",
    "to_full_feed",
    "to_sorted_active_feed_items",
    "to_sorted_feed_items",
    "to_sorted_post_feed_items",
    "to_sorted_search_feed_items",
]
