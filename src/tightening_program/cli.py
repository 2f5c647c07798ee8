"""
Command-line interface: prints a tightening program as a table.
"""

import argparse
import logging
import sys

import requests

from tightening_program.cache import CacheError
from tightening_program.config import SPEED_PROFILE_ENV, load_speed_profile
from tightening_program.form.inputs import DEFAULT_FORM_INPUTS, parameters_from_form
from tightening_program.program.errors import InvalidParameter, InvalidSpeedProfile
from tightening_program.program.generator import generate
from tightening_program.program.table import program_to_df


def build_parser() -> argparse.ArgumentParser:
    d = DEFAULT_FORM_INPUTS
    parser = argparse.ArgumentParser(
        prog="tightening-program",
        description="Generate a multi-step bolt tightening program",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 3 steps, torque strategy, class 8.8 (defaults)
  tightening-program

  # 5 steps ramping up to 120 Nm
  tightening-program --steps 5 --final-torque 120

  # Angle strategy: snug to 40 Nm, then 90 degrees
  tightening-program --bolt-class 12.9 --snug-torque 40 --angle 90

  # Custom speed table (file or URL)
  tightening-program --speed-profile plant_speeds.json
        """
    )

    parser.add_argument('--bolt-class', default=d["boltClass"], help=f'Bolt strength class (default: {d["boltClass"]})')
    parser.add_argument('--steps', default=d["steps"], help=f'Number of steps, rundown and final included (default: {d["steps"]})')
    parser.add_argument('--bolt-length', default=d["boltLength"], help=f'Bolt length in mm (default: {d["boltLength"]})')
    parser.add_argument('--pitch', default=d["pitch"], help=f'Thread pitch in mm (default: {d["pitch"]})')
    parser.add_argument('--part-thickness', default=d["partThickness"], help=f'Clamped part thickness in mm (default: {d["partThickness"]})')
    parser.add_argument('--snug-torque', default=d["snugTorque"], help=f'Snug torque in Nm (default: {d["snugTorque"]})')
    parser.add_argument('--final-torque', default=d["finalTorque"], help=f'Final torque in Nm (default: {d["finalTorque"]})')
    parser.add_argument(
        '--angle',
        default=None,
        help='Final angle in degrees; selects the angle strategy'
    )
    parser.add_argument(
        '--speed-profile',
        default=None,
        help=f'Speed table JSON file or URL (default: ${SPEED_PROFILE_ENV} or built-in table)'
    )
    parser.add_argument(
        '--merge-default',
        action='store_true',
        help='Overlay the loaded speed table on the built-in one'
    )
    parser.add_argument('--numeric', action='store_true', help='Print numeric columns instead of formatted text')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    raw = {
        "boltClass": args.bolt_class,
        "steps": args.steps,
        "boltLength": args.bolt_length,
        "pitch": args.pitch,
        "partThickness": args.part_thickness,
        "snugTorque": args.snug_torque,
        "finalTorque": args.final_torque,
        "useAngle": args.angle is not None,
    }
    if args.angle is not None:
        raw["angleDegrees"] = args.angle

    try:
        profile = load_speed_profile(args.speed_profile, merge_default=args.merge_default)
        params = parameters_from_form(raw, speed_profile=profile)
        program = generate(params, profile)
    except (InvalidParameter, InvalidSpeedProfile, FileNotFoundError,
            CacheError, requests.RequestException) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(program_to_df(program, numeric=args.numeric).to_string(index=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
