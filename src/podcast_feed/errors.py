"""
Exceptions raised by the podcast feed parser.

Field-level problems in a feed are never raised; they are recorded as
diagnostic strings on the parsed Channel or Episode. The exceptions here
cover the cases where continuing would hide a real fault: extraction code
asking for an undeclared namespace prefix, a document that is not XML at
all, or a feed that could not be fetched.
"""


class PodcastFeedError(Exception):
    """Base exception for all podcast feed errors."""

    pass


class NamespaceError(PodcastFeedError):
    """A qualified name used a prefix that the namespace catalog does not know."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"Namespace prefix '{prefix}' is not declared")


class FeedParseError(PodcastFeedError):
    """The feed document is not well-formed XML."""

    pass


class FeedFetchError(PodcastFeedError):
    """The feed document could not be retrieved."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch feed '{url}': {reason}")
