"""MCP server exposing vds items, types, linkages, schema and history as tools."""
