"""Exception types raised by the reviewer and its collaborators."""


class LeakReviewerError(Exception):
    """Base class for all reviewer errors."""


class MalformedPayloadError(LeakReviewerError):
    """The webhook body could not be decoded into an event."""


class CollaboratorError(LeakReviewerError):
    """A call to an external service failed."""


class GitHubError(CollaboratorError):
    """A GitHub API request failed."""


class SlackError(CollaboratorError):
    """A Slack API request failed."""


class ReviewError(CollaboratorError):
    """The AI review could not be produced."""
