"""Shared testing utilities for the Confluence MCP project.

- fake_client.py: in-memory Confluence used in place of the REST client
"""
