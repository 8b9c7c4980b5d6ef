"""CLI tools for ironwatch.

- ``python -m ironwatch.cli check TEAM_ID``: print a team's status
- ``python -m ironwatch.cli sync TEAM_ID [--force]``: refresh the cache
- ``python -m ironwatch.cli teams``: list known teams
- ``python -m ironwatch.cli broadcast``: push statuses to subscribers

Heavy imports (``ironwatch.main``) are deferred inside the command runner so
``--help`` stays fast.
"""
