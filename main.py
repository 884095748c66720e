"""
CLI entry point for court calibration.

Session file (JSON):

    {
      "sport":  "badminton",
      "camera": {"edge": "bottom", "distance": 3.0, "height": 2.5},
      "video":  {"width": 1920, "height": 1080},
      "lines":  [{"id": "service-short", "start": [412, 640], "end": [1508, 640]}, ...]
    }

Line endpoints are native video pixels.
"""
import argparse
import json
import sys
from pathlib import Path

from courtcal import CalibrationSession, CalibrationError, IllConditioned, InsufficientData
import config


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Calibrate a sports court camera from drawn reference lines",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--session", "-s",
        required=True,
        help="Path to the session description (JSON)"
    )

    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write the calibrated session snapshot to this JSON file"
    )

    parser.add_argument(
        "--refine",
        action="store_true",
        default=config.REFINE_HOMOGRAPHY,
        help="Polish the DLT solution with non-linear refinement"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print solver diagnostics"
    )

    return parser.parse_args(argv)


def run(desc: dict, refine: bool = False, verbose: bool = False) -> CalibrationSession:
    """Build a session from a session description and calibrate it."""
    session = CalibrationSession(sport=desc.get("sport", "badminton"),
                                 refine=refine, auto_recalibrate=False,
                                 verbose=verbose)
    camera = desc.get("camera")
    if camera:
        session.set_camera_position(camera["edge"], camera["distance"], camera["height"])

    video = desc["video"]
    for line in desc.get("lines", []):
        session.add_line(line["id"], line["start"], line["end"],
                         video["width"], video["height"])

    if session.store.is_complete():
        session.recalibrate()
    return session


def print_report(session: CalibrationSession) -> None:
    print(f"Sport: {session.court.sport.value}")
    print(f"Lines: {session.store.count()}")
    for corr in session.store:
        for w in corr.warnings:
            print(f"  Warning: {w}")
    print(session.status_message())

    result = session.get_current_result()
    if result is None:
        return
    print("\n--- Calibration Report ---")
    print(f"Quality:            {result.quality_label} ({result.accuracy_percent}%)")
    print(f"Reprojection error: {result.reprojection_error_px:.3f} px "
          f"(residual {result.dlt_residual_px:.3f} + "
          f"orientation {result.orientation_penalty_px:.1f})")
    print(f"Condition number:   {result.condition_number:.1f}")
    for line_id, score in result.line_scores.items():
        print(f"  {line_id:<28} {score:.3f}")
    if result.example_transform:
        ex = result.example_transform
        print(f"Frame center → ({ex.world_point[0]:.2f}, {ex.world_point[1]:.2f}) m, "
              f"{ex.pixels_per_meter:.1f} px/m")
    if result.viewing_angle_deg is not None:
        print(f"Viewing angle:      {result.viewing_angle_deg:.1f}°")
    for rec in result.recommendations:
        print(f"  - {rec}")


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    session_path = Path(args.session)
    if not session_path.exists():
        print(f"Error: Session file not found: {args.session}")
        sys.exit(1)

    try:
        with open(session_path) as f:
            desc = json.load(f)
        session = run(desc, refine=args.refine, verbose=args.verbose)
    except (json.JSONDecodeError, KeyError) as e:
        print(f"Error: Malformed session file: {e}")
        sys.exit(1)
    except CalibrationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_report(session)

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w") as f:
            json.dump(session.to_dict(), f, indent=2)
        print(f"\nSaved session → {out}")

    try:
        if session.last_solve is not None:
            session.last_solve.raise_for_status()
    except (InsufficientData, IllConditioned) as e:
        print(f"Error: Calibration failed: {e}")
        sys.exit(2)

    if not session.is_calibrated():
        sys.exit(2)


if __name__ == "__main__":
    main()
