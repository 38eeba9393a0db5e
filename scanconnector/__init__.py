"""
GitHub Code Scanning Connector

Pulls GitHub code scanning alerts across every organization installation of a
GitHub App and maps each alert rule into a generic connector object consumed by
downstream asset/identity platforms:
- Authenticates as a GitHub App and mints installation tokens (PyGithub)
- Lists installations, repositories and code scanning alerts (REST v3)
- Describes the "Code Scanning Alert" object schema
- Streams converted objects to a handler that can stop the sync early

Entry point for operators is the `sync_code_scanning_alerts` management command.
"""

__version__ = '1.0.0'
