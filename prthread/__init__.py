"""Mirror Azure DevOps pull-request lifecycle events into Slack threads."""

__version__ = "0.1.0"
