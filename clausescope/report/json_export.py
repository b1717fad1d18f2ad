from __future__ import annotations
import json
from typing import Any, Dict, Optional
from clausescope.utils.types import DocumentRiskReport, FlagScan


def build_report_json(
    report: DocumentRiskReport,
    meta: Dict[str, Any],
    flags: Optional[FlagScan] = None,
) -> str:
    """Return a JSON snapshot of one document analysis.

    meta can carry model names, config values or a build timestamp.
    """
    payload: Dict[str, Any] = {
        "meta": meta,
        "report": report.as_dict(),
        "counts": {
            "red": len(report.red_flags),
            "yellow": len(report.yellow_flags),
            "green": len(report.green_flags),
        },
    }
    if flags is not None:
        payload["flags"] = flags.as_dict()
    return json.dumps(payload, ensure_ascii=False, indent=2)
