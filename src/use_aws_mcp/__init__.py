"""MCP server exposing the AWS CLI as a single ``use_aws`` tool."""

__version__ = "0.1.0"
