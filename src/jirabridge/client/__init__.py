"""Jira REST client."""

from jirabridge.client.adf import adf_to_text
from jirabridge.client.tracker import TrackerClient, create_http_client

__all__ = ["TrackerClient", "adf_to_text", "create_http_client"]
