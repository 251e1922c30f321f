#!/usr/bin/env python3
"""
Open Model - Batch exporter

Compile project snapshots to Framework Open Model JSON.

Usage:
    open-model-export models/chair.bbmodel models/table.bbmodel -o out
    python -m open_model.export_all models/*.bbmodel --minify --preview
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .codec import EXTENSION, FORMAT_ID, OpenModelCodec
from .config import ExportSettings
from .io import load_project
from .preview import save_preview

logger = logging.getLogger(__name__)


def export_project(
    project_file: Path,
    settings: ExportSettings,
    output_dir: Path,
    preview: bool = False
) -> Dict[str, Any]:
    """
    Compile one project snapshot and write its model (and preview).

    Returns:
        Result record for the run summary
    """
    project = load_project(project_file)
    warnings: List[str] = []

    def notify(key: str, message: str) -> None:
        logger.warning(f"{project.name}: {message}")
        warnings.append(key)

    codec = OpenModelCodec(project, settings, notify=notify)
    model_path = codec.export(output_dir / f"{project.name}.{EXTENSION}")

    result: Dict[str, Any] = {
        "status": "success",
        "model": str(model_path),
        "warnings": warnings,
    }

    if preview:
        document = codec.compile({"raw": True, "prevent_dialog": True})
        if document.get("components"):
            result["preview"] = save_preview(document, output_dir / f"{project.name}.glb")
        else:
            logger.info(f"{project.name}: no components, skipping preview")

    return result


def export_projects(
    project_files: List[Path],
    settings: ExportSettings,
    output_dir: Path,
    preview: bool = False
) -> Dict[str, Any]:
    """
    Export every project file, collecting failures instead of stopping.

    Args:
        project_files: Project snapshot paths
        settings: Global export settings
        output_dir: Output directory
        preview: Also write a GLB preview per project

    Returns:
        Summary dictionary
    """
    summary: Dict[str, Any] = {
        "timestamp": datetime.now().isoformat(),
        "format": FORMAT_ID,
        "settings": settings.to_dict(),
        "projects": [],
        "errors": []
    }

    for project_file in project_files:
        logger.info(f"Exporting: {project_file}")
        record: Dict[str, Any] = {"project_file": str(project_file)}
        try:
            record.update(export_project(project_file, settings, output_dir, preview=preview))
        except Exception as e:
            logger.error(f"Failed to export {project_file}: {e}")
            record["status"] = "error"
            record["error"] = str(e)
            summary["errors"].append({
                "project_file": str(project_file),
                "error": str(e)
            })
        summary["projects"].append(record)

    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Open Model - Compile project snapshots to Framework Open Model JSON"
    )
    parser.add_argument(
        "projects",
        nargs="+",
        type=Path,
        help="Project snapshot files (.bbmodel / .json)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("outputs"),
        help="Output directory"
    )
    parser.add_argument(
        "--settings", "-s",
        type=Path,
        default=None,
        help="Export settings JSON (credit, export_groups, ...)"
    )
    parser.add_argument(
        "--credit",
        default=None,
        help="Credit text written to each model (empty string disables)"
    )
    parser.add_argument(
        "--no-groups",
        action="store_true",
        help="Do not write the groups hierarchy"
    )
    parser.add_argument(
        "--no-names",
        action="store_true",
        help="Do not write element names"
    )
    parser.add_argument(
        "--minify",
        action="store_true",
        help="Compact JSON output"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Also write a GLB preview per model"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> ExportSettings:
    settings = ExportSettings.from_json(args.settings) if args.settings else ExportSettings()
    if args.credit is not None:
        settings.credit = args.credit
    if args.no_groups:
        settings.export_groups = False
    if args.no_names:
        settings.export_cube_names = False
    if args.minify:
        settings.minified_output = True
    return settings


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    settings = settings_from_args(args)

    logger.info(f"Exporting {len(args.projects)} projects to {args.output}")
    summary = export_projects(
        project_files=args.projects,
        settings=settings,
        output_dir=args.output,
        preview=args.preview
    )

    summary_path = args.output / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)
    logger.info(f"Summary saved to: {summary_path}")

    n_success = sum(1 for p in summary["projects"] if p.get("status") == "success")
    n_errors = len(summary["errors"])
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
