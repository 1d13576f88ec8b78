#!/usr/bin/env python3
"""
EduSolver - Homework assistant that explains problems from photos and text.

Entry point for the application with CLI support.

Usage:
    edusolver                                 # Launch GUI
    edusolver photo.jpg                       # Solve a photographed problem
    edusolver -t "2x + 3 = 7" --style brief   # Solve typed text
    edusolver --teacher -t "Photosynthesis"   # Generate practice questions
    edusolver --history                       # List saved scans
"""

import sys
import os
import argparse
import json
from typing import List, Optional

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from edusolver import __version__  # noqa: E402


def _enum_parser(enum_cls):
    """argparse type accepting an enum value or member name, case-insensitive."""

    def parse(text: str):
        wanted = text.strip().lower()
        for member in enum_cls:
            if wanted in (member.value.lower(), member.name.lower()):
                return member
        choices = ", ".join(m.value for m in enum_cls)
        raise argparse.ArgumentTypeError(f"invalid choice: {text!r} (choose from {choices})")

    parse.__name__ = enum_cls.__name__
    return parse


def _crop_type(text: str):
    from edusolver.input.crop import CropSelection

    try:
        return CropSelection.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    from edusolver.models import EducationLevel, ExplanationStyle, Subject

    parser = argparse.ArgumentParser(
        prog="edusolver",
        description="Homework assistant: photograph or type a problem and get an explanation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  edusolver                                   Launch the GUI
  edusolver page.jpg --crop 0.1,0.2,0.8,0.5   Solve part of a photo
  edusolver -t "Hitung 3/4 + 1/2" --level SD  Solve typed text
  edusolver --teacher --count 3 -t "Hukum Newton" --subject Fisika
  edusolver --history                         List saved scans
  edusolver --export history.md               Export history
        """,
    )

    # Positional: images to send
    parser.add_argument(
        "images",
        nargs="*",
        metavar="IMAGE",
        help="Image file(s) with the problem",
    )

    parser.add_argument(
        "-t",
        "--text",
        action="append",
        default=[],
        help="Problem text (repeatable)",
    )

    # Preferences
    parser.add_argument(
        "--level",
        type=_enum_parser(EducationLevel),
        help="Education level (default: last used)",
    )
    parser.add_argument(
        "--subject",
        type=_enum_parser(Subject),
        help="Subject (default: last used)",
    )
    parser.add_argument(
        "--custom-subject",
        metavar="NAME",
        help="Subject name when --subject is Lainnya",
    )
    parser.add_argument(
        "--style",
        type=_enum_parser(ExplanationStyle),
        default=ExplanationStyle.DETAILED,
        help="detailed, brief or direct (default: detailed)",
    )

    # Teacher mode
    parser.add_argument(
        "--teacher",
        action="store_true",
        help="Generate practice questions with an answer key",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=5,
        help="Number of questions in teacher mode (1-10, default: 5)",
    )

    parser.add_argument(
        "--crop",
        type=_crop_type,
        metavar="X,Y,W,H",
        help="Crop every image to this normalized rectangle",
    )

    parser.add_argument(
        "--api-key",
        default=os.environ.get("GEMINI_API_KEY"),
        help="Gemini API key (default: $GEMINI_API_KEY)",
    )

    # Output format
    parser.add_argument(
        "-f",
        "--format",
        choices=["text", "json", "html"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not store the result in history",
    )

    # History
    parser.add_argument(
        "--history",
        action="store_true",
        help="List saved scans",
    )
    parser.add_argument(
        "--show",
        metavar="ID",
        help="Print a saved scan (id or unique id prefix)",
    )
    parser.add_argument(
        "--delete",
        metavar="ID",
        help="Delete a saved scan",
    )
    parser.add_argument(
        "--clear-history",
        action="store_true",
        help="Delete all saved scans",
    )
    parser.add_argument(
        "--export",
        metavar="PATH",
        help="Export history to a .txt, .csv or .md file",
    )

    parser.add_argument(
        "--list-subjects",
        action="store_true",
        help="List education levels and subjects",
    )
    parser.add_argument(
        "--check-camera",
        action="store_true",
        help="Check that the camera can be opened",
    )

    # GUI mode (explicit)
    parser.add_argument(
        "--gui",
        action="store_true",
        help="Launch GUI mode (default if no problem given)",
    )

    # Version
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Verbose
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show log output on stderr",
    )

    return parser


def find_scan(session, ident: str):
    """
    Find a scan by full id or unique id prefix.

    Raises:
        ScanNotFoundError: If nothing (or more than one scan) matches.
    """
    from edusolver.utils.errors import ScanNotFoundError

    matches = [s for s in session.scans if s.id == ident]
    if not matches:
        matches = [s for s in session.scans if s.id.startswith(ident)]
    if len(matches) != 1:
        raise ScanNotFoundError(ident)
    return matches[0]


def print_scan(scan, output_format: str) -> None:
    """Print a scan in the requested format."""
    if output_format == "json":
        output = {
            "id": scan.id,
            "timestamp": scan.timestamp,
            "mode": scan.mode.value,
            "level": scan.education_level.value,
            "subject": scan.display_subject,
            "style": scan.explanation_style.value,
            "images": len(scan.images),
            "texts": scan.text_inputs,
            "solution": scan.solution,
            "error": scan.error,
        }
        if scan.question_count is not None:
            output["question_count"] = scan.question_count
        print(json.dumps(output, indent=2, ensure_ascii=False))

    elif output_format == "html":
        from edusolver.output.renderer import SolutionRenderer

        print(SolutionRenderer().render_scan(scan))

    else:  # text
        print(f"{scan.education_level.value} | {scan.display_subject} | {scan.explanation_style.label}")
        print()
        if scan.error:
            print(scan.error)
        else:
            print(scan.solution or "")


def list_history(session) -> int:
    """Print one line per saved scan."""
    from datetime import datetime

    scans = session.scans
    if not scans:
        print("No saved scans")
        return 0

    for scan in scans:
        date = datetime.fromtimestamp(scan.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        status = "pending" if scan.loading else "failed" if scan.error else "done"
        print(
            f"{scan.id[:12]}  {date}  {scan.mode.value:<7}  "
            f"{scan.education_level.value:<14}  {scan.display_subject:<14}  "
            f"{status:<7}  {scan.summary(40)}"
        )

    print(f"\nTotal: {len(scans)} scans")
    return 0


def list_subjects() -> int:
    """List education levels and subjects."""
    from edusolver.models import EducationLevel, ExplanationStyle, Subject

    print("LEVELS")
    for level in EducationLevel:
        print(f"  {level.value}")
    print("\nSUBJECTS")
    for subject in Subject:
        print(f"  {subject.value}")
    print("\nSTYLES")
    for style in ExplanationStyle:
        print(f"  {style.value:<10} {style.label}")
    return 0


def stage_images(session, paths: List[str], crop) -> None:
    """Load, optionally crop, and stage image files."""
    from edusolver.input.crop import crop_image
    from edusolver.input.images import CROP_JPEG_QUALITY, encode_jpeg, load_image_file

    for path in paths:
        image = load_image_file(path)
        if crop is not None:
            image = crop_image(image, crop)
        session.staging.add_image(encode_jpeg(image, quality=CROP_JPEG_QUALITY))


def solve_cli(session, args) -> int:
    """Submit the given images and texts and print the result."""
    from edusolver.models import AppMode
    from edusolver.utils.errors import EduSolverError, format_error_for_user

    try:
        session.set_api_key(args.api_key or "")

        if args.level is not None:
            session.set_level(args.level)
        if args.subject is not None:
            session.set_subject(args.subject)
        if args.custom_subject is not None:
            session.set_custom_subject(args.custom_subject)

        session.set_mode(AppMode.TEACHER if args.teacher else AppMode.STUDENT)
        session.explanation_style = args.style
        session.question_count = args.count

        stage_images(session, args.images, args.crop)
        for text in args.text:
            session.staging.add_text(text)

        if args.verbose:
            print("Solving...", file=sys.stderr)

        scan = session.submit(save=not args.no_save)
    except EduSolverError as e:
        print(f"Error: {format_error_for_user(e)}", file=sys.stderr)
        return 1

    print_scan(scan, args.format)
    return 1 if scan.error else 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    from edusolver.utils.config import AppConfig
    from edusolver.utils.errors import EduSolverError, format_error_for_user
    from edusolver.utils.logging_setup import configure_logging

    try:
        config = AppConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_dir, verbose=args.verbose)

    # List subjects mode
    if args.list_subjects:
        return list_subjects()

    if args.check_camera:
        from edusolver.input.camera import check_camera_access

        if check_camera_access(config.camera_index):
            print("Camera access is working")
            return 0
        print("Camera access denied. Allow camera access in your system settings.", file=sys.stderr)
        return 1

    has_problem = bool(args.images or args.text)
    history_action = (
        args.history or args.show or args.delete or args.clear_history or args.export
    )

    # GUI mode
    if args.gui or (not has_problem and not history_action):
        from edusolver.gui.main_window import run_app

        run_app(config)
        return 0

    from edusolver.session import HomeworkSession

    try:
        session = HomeworkSession(config)

        if args.history:
            return list_history(session)

        if args.show:
            print_scan(find_scan(session, args.show), args.format)
            return 0

        if args.delete:
            scan = find_scan(session, args.delete)
            session.delete_scan(scan.id)
            print(f"Deleted {scan.id}")
            return 0

        if args.clear_history:
            count = session.clear_history()
            print(f"Deleted {count} scans")
            return 0

        if args.export:
            from edusolver.output.exporter import HistoryExporter

            scans = session.scans
            HistoryExporter(scans).export(args.export)
            print(f"Exported {len(scans)} scans to {args.export}")
            return 0
    except EduSolverError as e:
        print(f"Error: {format_error_for_user(e)}", file=sys.stderr)
        return 1

    # CLI solve mode
    return solve_cli(session, args)


if __name__ == "__main__":
    sys.exit(main() or 0)
