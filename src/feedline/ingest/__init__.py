"""Parsing of backend payloads into feed models."""

from .parse import (
    ParseResult,
    normalize_datetime,
    parse_discussion_response,
    parse_discussion_responses,
    parse_feed_record,
    parse_feed_records,
)

__all__ = [
    "ParseResult",
    "normalize_datetime",
    "parse_discussion_response",
    "parse_discussion_responses",
    "parse_feed_record",
    "parse_feed_records",
]
