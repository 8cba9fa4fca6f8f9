"""Host asset pipeline registration.

Keeps the two pattern collections the host consults when deciding which
files to precompile and which files to serve without a digest.

Contract:
- Inputs: Compiled regex patterns (or strings compiled on registration)
- Outputs: Membership checks for asset logical paths
- Side Effects: None beyond in-memory list mutation
"""

import logging
import re
from re import Pattern

logger = logging.getLogger(__name__)


class AssetPipeline:
    """Append-only precompile list and digest whitelist.

    Registering the same pattern twice is harmless; matching only asks
    whether any pattern matches.

    Example:
        >>> pipeline = AssetPipeline()
        >>> pipeline.register(r"\\Afrontend/")
        >>> pipeline.precompiled("frontend/assets/vendor.js")
        True
    """

    def __init__(self: "AssetPipeline") -> None:
        self.precompile: list[Pattern[str]] = []
        self.digest_whitelist: list[Pattern[str]] = []

    def register(self: "AssetPipeline", pattern: Pattern[str] | str) -> None:
        """Add a pattern to both the precompile list and the digest whitelist.

        Args:
            pattern: Compiled pattern or regex source
        """
        if isinstance(pattern, str):
            pattern = re.compile(pattern)

        self.precompile.append(pattern)
        self.digest_whitelist.append(pattern)
        logger.debug(f"Registered asset pattern {pattern.pattern!r}")

    def precompiled(self: "AssetPipeline", logical_path: str) -> bool:
        return any(p.search(logical_path) for p in self.precompile)

    def whitelisted(self: "AssetPipeline", logical_path: str) -> bool:
        return any(p.search(logical_path) for p in self.digest_whitelist)
