"""Azure DevOps target."""

from archsync.targets.azure_devops.target import AzureDevOpsTarget, encode_pat

__all__ = ["AzureDevOpsTarget", "encode_pat"]
