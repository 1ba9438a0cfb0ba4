from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from .plan import BuildPlan


class PlanManifest:
    """Writes a compiled plan as JSON for diagnostics."""

    filename = "build_plan.json"

    def __init__(self, dist_path: Path):
        self.dist_path = dist_path

    def payload(self, plan: BuildPlan, metadata: Optional[Dict] = None) -> Dict:
        data = plan.to_dict()
        data["metadata"] = metadata or {}
        return data

    def save(self, plan: BuildPlan, metadata: Optional[Dict] = None) -> Path:
        self.dist_path.mkdir(parents=True, exist_ok=True)
        manifest_path = self.dist_path / self.filename
        with open(manifest_path, "w") as f:
            json.dump(self.payload(plan, metadata), f, indent=2)
        return manifest_path
