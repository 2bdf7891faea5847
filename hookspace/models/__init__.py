"""Data models for hook workspaces.

- **config**: Parsed configuration and manifest schemas (Pydantic)
- **hook**: Resolved repos and fully assembled hooks
- **project**: Projects and the workspace that orders them
"""
