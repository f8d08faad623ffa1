"""Shared FastMCP server instance that every tool module registers against."""

from fastmcp import FastMCP

from auth.config import GOOGLE_WORKSPACE_MCP_APP_NAME

server = FastMCP(name=GOOGLE_WORKSPACE_MCP_APP_NAME)
