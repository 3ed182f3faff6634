"""Connector interfaces and implementations."""

from .base import ThreadSink, ThreadSinkError
from .slack import SlackThreadSink, build_slack_client

__all__ = ["SlackThreadSink", "ThreadSink", "ThreadSinkError", "build_slack_client"]
