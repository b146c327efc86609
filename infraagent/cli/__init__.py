"""CLI commands for infraagent.

Key Commands:
    auth (infraagent.cli.auth):
        Store, list, verify and remove platform credentials in the
        encrypted vault.

    secrets (infraagent.cli.secrets):
        Seal values and push them into GitHub repository secrets.

Usage Examples:
    Configure GitHub access::

        $ infraagent auth add github

    Push a repository secret::

        $ infraagent secrets push octo/app DEPLOY_TOKEN --value "..."
"""

from infraagent.cli.auth import auth_group
from infraagent.cli.secrets import secrets_group

__all__ = ["auth_group", "secrets_group"]
