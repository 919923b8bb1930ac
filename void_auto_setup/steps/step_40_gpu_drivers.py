from __future__ import annotations

import logging

from ..config import GpuPreference
from ..lib.hwdetect import GpuVendor, detect_gpu_vendor
from ..lib.manifests import package_list
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)


class GpuDriversStep(ProvisionStep):
    step_id = "40_gpu_drivers"
    label = "Install GPU drivers (if detected)"

    def _vendor(self, ctx: RunContext) -> GpuVendor:
        if ctx.cfg.gpu is not GpuPreference.AUTO:
            return GpuVendor(ctx.cfg.gpu.value)

        pciutils = package_list(ctx.manifest.get("gpu") or {}, "pciutils")
        vendor = detect_gpu_vendor(
            install_pciutils=lambda: ctx.resolver.install(*pciutils),
            dry_run=ctx.dry_run,
        )
        logger.info("Auto-detected GPU vendor: %s", vendor.value)
        return vendor

    def _nvidia(self, ctx: RunContext, spec: dict) -> None:
        logger.info("Installing NVIDIA proprietary driver stack...")
        # Kernel headers are needed for the dkms module.
        ctx.resolver.install(*package_list(spec, "headers"))
        dkms = package_list(spec, "dkms")
        if dkms and ctx.resolver.available(dkms[0]):
            ctx.resolver.install(*dkms)
        else:
            ctx.resolver.install(*package_list(spec, "plain"))
            logger.warning("nvidia-dkms not found; kernel module packaging may differ on your repo snapshot.")
        ctx.resolver.install_if_available(*package_list(spec, "optional"))

    def _amd(self, ctx: RunContext, spec: dict) -> None:
        logger.info("Installing AMD Mesa/Vulkan stack...")
        ctx.resolver.install(*package_list(spec, "packages"))
        ctx.resolver.install_if_available(*package_list(spec, "optional"))
        if ctx.cfg.amdvlk:
            ctx.resolver.install_if_available(*package_list(spec, "amdvlk"))

    def _intel(self, ctx: RunContext, spec: dict) -> None:
        logger.info("Installing Intel Mesa/Vulkan stack...")
        ctx.resolver.install(*package_list(spec, "packages"))

    def run(self, ctx: RunContext) -> StepResult:
        gpu = ctx.manifest.get("gpu") or {}
        vendor = self._vendor(ctx)
        ctx.decisions["gpu_vendor"] = vendor.value

        if vendor is GpuVendor.NONE:
            logger.warning(
                "Skipping GPU driver installation because no suitable GPU was detected. "
                "You will need to install drivers manually."
            )
            return StepResult.success("no gpu")

        handler = {
            GpuVendor.NVIDIA: self._nvidia,
            GpuVendor.AMD: self._amd,
            GpuVendor.INTEL: self._intel,
        }[vendor]
        handler(ctx, gpu.get(vendor.value) or {})
        return StepResult.success()
