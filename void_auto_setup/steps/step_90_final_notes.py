from __future__ import annotations

import logging

from ..pipeline import RunContext, StepResult
from .base import ProvisionStep

logger = logging.getLogger(__name__)

NOTES = """
============================================================
Done.

Notes:
- Services enabled (as applicable): dbus, elogind/seatd, bluetoothd, login-manager.
- PipeWire/WirePlumber are started via user autostart entries (no systemd user units on Void).
- If you chose "none" for login manager, use:
    startx
  from a TTY (after login) to start X11 sessions.
- For Wayland sessions, use SDDM/LightDM/greetd, or run the compositor from a tty.

Log:
  {log_path}
============================================================
"""


class FinalNotesStep(ProvisionStep):
    step_id = "90_final_notes"
    label = "Print final notes"

    def run(self, ctx: RunContext) -> StepResult:
        logger.info("Final summary: %s", ctx.decisions)
        print(NOTES.format(log_path=ctx.decisions.get("log_path", ctx.paths.log_default)))
        return StepResult.success()
