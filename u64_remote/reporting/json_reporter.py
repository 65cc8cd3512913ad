"""JSON output for upload and listing results.

Follows a single envelope for every command:
{
    "success": bool,
    "command": "upload" | "list",
    "data": { ... },
    "message": str
}
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

from ..discovery.models import DiscoveredDevice
from ..runner.executor import ExecutionResult


class JsonReporter:
    """Generates JSON documents from run results."""

    def generate_upload_output(self, result: ExecutionResult) -> dict[str, Any]:
        """Envelope for an upload run."""
        data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "program": result.program,
            "address": result.address or None,
            "source": result.source,
            "bytes_sent": result.bytes_sent,
            "duration_ms": result.duration_ms,
        }

        if result.success:
            message = f"Uploaded {result.bytes_sent} bytes to {result.address}"
        else:
            message = f"Upload failed: {result.error}"

        return {
            "success": result.success,
            "command": "upload",
            "data": data,
            "message": message,
        }

    def generate_listing_output(
        self,
        devices: list[DiscoveredDevice],
        strategy: Optional[str] = None,
    ) -> dict[str, Any]:
        """Envelope for a device listing."""
        data: dict[str, Any] = {
            "strategy": strategy,
            "devices": [
                {
                    "index": i,
                    "hostname": device.hostname,
                    "address": device.address,
                    "port": device.port,
                    "base_url": device.base_url,
                }
                for i, device in enumerate(devices)
            ],
        }

        return {
            "success": True,
            "command": "list",
            "data": data,
            "message": f"{len(devices)} device(s) found",
        }

    def generate_error_output(self, command: str, message: str) -> dict[str, Any]:
        """Envelope for a command that failed before producing a result."""
        data: Optional[dict[str, Any]] = None
        if command == "list":
            data = {"strategy": None, "devices": []}

        return {
            "success": False,
            "command": command,
            "data": data,
            "message": message,
        }

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        """Convert report to JSON string.

        Args:
            report: Report dictionary.
            pretty: If True, format with indentation.

        Returns:
            JSON string.
        """
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)
