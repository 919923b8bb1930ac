from __future__ import annotations

import logging

from ..lib.manifests import package_list
from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)


class CoreServicesStep(ProvisionStep):
    step_id = "20_core_services"
    label = "Install core services (dbus + seat stack + polkit)"

    def run(self, ctx: RunContext) -> StepResult:
        core = ctx.manifest.get("core") or {}
        seat = ctx.cfg.seat_management
        logger.info("Installing core services: dbus + %s + polkit", seat.value)

        ctx.resolver.install(*package_list(core, "packages"))
        for svc in package_list(core, "services"):
            ctx.services.enable(svc)

        ctx.resolver.install(seat.value)
        ctx.services.enable(seat.value)
        ctx.decisions["seat_management"] = seat.value
        return StepResult.success()


class AudioBluetoothStep(ProvisionStep):
    step_id = "22_audio_bluetooth"
    label = "Install PipeWire + Bluetooth"

    def run(self, ctx: RunContext) -> StepResult:
        audio = ctx.manifest.get("audio") or {}
        logger.info("Installing PipeWire + WirePlumber + Bluetooth stack...")
        ctx.resolver.install(*package_list(audio, "packages"))
        ctx.resolver.install(*package_list(audio, "bluetooth"))

        # Bluetooth audio may still work without it if PipeWire was built with SPA bluetooth.
        ctx.resolver.install_if_available(*package_list(audio, "optional"))

        for svc in package_list(audio, "services"):
            ctx.services.enable(svc)
        return StepResult.success()


class DevToolsStep(ProvisionStep):
    step_id = "24_dev_tools"
    label = "Install development tools"

    def run(self, ctx: RunContext) -> StepResult:
        dev = ctx.manifest.get("dev_tools") or {}
        logger.info("Installing development tools...")
        ctx.resolver.install(*package_list(dev, "packages"))
        ctx.resolver.install_if_available(*package_list(dev, "optional"))
        return StepResult.success()
