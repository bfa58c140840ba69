"""bundleforge: build-and-publish pipeline for app bundles.

Clones a repository at a commit, builds it with the project's package
manager, hashes the bundle, uploads it to content-addressed storage and
registers its metadata with the management API.
"""

__version__ = "0.1.0"
__description__ = "Clone, build, hash, upload and register app bundles"

from bundleforge.core.orchestrator import DeployPipeline
from bundleforge.cli.app import app as cli

__all__ = ["DeployPipeline", "cli", "__version__"]
