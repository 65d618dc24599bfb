from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import PreconditionError
from ..lib.fetcher import fetch_bundle
from ..lib.materialize import installed_at, materialize, placeholder_values
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class InstallBundleStep:
    step_id = "40_install_bundle"
    title = "Installing Speedflow components"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        safety = state.get("git_safety") or {}
        if not safety.get("certified"):
            # Nothing may be written into the project before the safety step passes.
            raise PreconditionError("Git safety not certified; refusing to write into the project")

        logger.info("Installing Speedflow in current directory: %s", ctx.project_dir)
        bundle = fetch_bundle(ctx.request, ctx.cfg, ctx.scratch)

        values = placeholder_values(
            version=bundle.version,
            auto_update=ctx.request.auto_update_value,
            timestamp=installed_at(),
        )
        result = materialize(
            bundle.path,
            ctx.target,
            choice=ctx.request.on_existing,
            exclude=ctx.cfg.bundle_excludes,
            values=values,
        )

        state["bundle"] = {"version": bundle.version, "ref": bundle.ref}
        state["materialized"] = {
            "target": str(result.target),
            "backup": str(result.backup) if result.backup else None,
            "copied": result.copied,
            "rendered": result.rendered,
        }
        logger.info("Speedflow structure installed")
        return state
