from .github_client import AdvisoryClient, AdvisoryLookupError, AdvisoryRecord

__all__ = ["AdvisoryClient", "AdvisoryLookupError", "AdvisoryRecord"]
