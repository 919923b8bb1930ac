from __future__ import annotations

import logging

from ..lib.hwdetect import detect_arch
from ..lib.manifests import package_list
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)


class EnableReposStep(ProvisionStep):
    step_id = "10_enable_repos"
    label = "Enable Void repos"

    def run(self, ctx: RunContext) -> StepResult:
        repos = ctx.manifest.get("repos") or {}
        arch = detect_arch()
        ctx.decisions["arch"] = arch

        # These metapackages drop repo files into /etc/xbps.d/.
        ctx.resolver.sync()

        nonfree = str(repos.get("nonfree", "void-repo-nonfree"))
        if not ctx.resolver.install_if_available(nonfree):
            logger.warning("%s not found in repos. NVIDIA proprietary may not be installable.", nonfree)

        if arch == "x86_64":
            ctx.resolver.install_if_available(*package_list(repos, "multilib"))
        else:
            logger.warning("Architecture %s: multilib likely not available. Skipping multilib repos.", arch)

        ctx.resolver.sync()
        return StepResult.success()
