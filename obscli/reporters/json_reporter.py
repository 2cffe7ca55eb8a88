"""JSON reporter for structured output.

Collects every result of a command and writes them as one JSON document,
for scripts that consume listings or batch outcomes.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from obscli.models import BatchResult, ObsResponse, PartDescriptor
from obscli.reporters.base import Reporter


class JsonReporter(Reporter):
    """JSON reporter for structured output.

    Args:
        output_path: File path to write JSON output, or "-" for stdout
    """

    def __init__(self, output_path: str = "-"):
        self.output_path = output_path
        self._results: list[dict[str, Any]] = []
        self._parts: list[dict[str, Any]] = []

    def on_response(
        self,
        action: str,
        response: ObsResponse,
        rows: Optional[list[dict[str, str]]] = None,
    ) -> None:
        entry: dict[str, Any] = {
            "action": action,
            "status": response.status_code,
            "ok": response.ok,
        }
        if rows is not None:
            entry["rows"] = rows
        else:
            entry["body"] = response.text
        self._results.append(entry)

    def on_batch_complete(self, action: str, result: BatchResult) -> None:
        units = []
        for unit in result.units:
            unit_data: dict[str, Any] = {"name": unit.name, "ok": unit.ok}
            if unit.response is not None:
                unit_data["status"] = unit.response.status_code
            if unit.error:
                unit_data["error"] = unit.error
            units.append(unit_data)

        self._results.append({
            "action": action,
            "ok": result.all_ok,
            "units": units,
            "summary": {
                "total": len(result.units),
                "succeeded": len(result.succeeded),
                "failed": len(result.failed),
            },
        })

    def on_part_complete(self, part: PartDescriptor, total_parts: int) -> None:
        self._parts.append({
            "part_number": part.part_number,
            "offset": part.offset,
            "length": part.length,
            "etag": part.etag,
        })

    def on_error(self, action: str, message: str) -> None:
        self._results.append({"action": action, "ok": False, "error": message})

    def on_run_complete(self) -> dict:
        """Write the collected results and return them."""
        output = self._generate_output()
        if self.output_path == "-":
            json.dump(output, sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            self._write_to_file(output)
        return output

    def _generate_output(self) -> dict:
        output: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "results": self._results,
        }
        if self._parts:
            output["parts"] = sorted(self._parts, key=lambda p: p["part_number"])
        return output

    def _write_to_file(self, output: dict) -> None:
        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2)
