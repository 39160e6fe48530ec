"""
Routers module - API endpoint handlers organized by feature.

- assistant: natural language requests through the assistant pipeline
"""
