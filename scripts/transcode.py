"""Convert schedules between the JSON interchange shape and annotated text.

Standalone CLI script for operators checking what the portal sends to and
receives from the generation service.

Encode:  python scripts/transcode.py encode schedule.json
Strict:  python scripts/transcode.py encode schedule.json --strict
Sparse:  python scripts/transcode.py encode schedule.json --fill-month
Decode:  python scripts/transcode.py decode summary.txt --year 2026 --month 2
Recover: python scripts/transcode.py recover response.txt
Stdin:   cat schedule.json | python scripts/transcode.py encode -

Exit codes:
  0 = success (text or JSON on stdout)
  1 = error (message on stderr)
"""

import argparse
import json
import os
import sys

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pydantic import ValidationError  # noqa: E402

from src.transcoder.config import get_config  # noqa: E402
from src.transcoder.decoder import decode_text  # noqa: E402
from src.transcoder.encoder import encode_schedule, fill_month  # noqa: E402
from src.transcoder.errors import TranscoderError  # noqa: E402
from src.transcoder.logging import setup_logging  # noqa: E402
from src.transcoder.models import schedule_from_json, schedule_to_json  # noqa: E402
from src.transcoder.recovery import RecoveryGate  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for output."""
    print(msg, file=sys.stderr)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Convert schedules between JSON and annotated day-by-day text.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scope",
        choices=["name", "run"],
        default=None,
        help="Merge code scope (default: MERGE_CODE_SCOPE or 'name').",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    encode = sub.add_parser("encode", help="JSON schedule -> annotated text.")
    encode.add_argument("input", help="JSON file, or '-' for stdin.")
    encode.add_argument(
        "--strict",
        action="store_true",
        help="Fail unless every day of the month is present.",
    )
    encode.add_argument(
        "--fill-month",
        action="store_true",
        help="Add empty days for dates missing from the month.",
    )

    decode = sub.add_parser("decode", help="Annotated text -> JSON schedule.")
    decode.add_argument("input", help="Text file, or '-' for stdin.")
    decode.add_argument("--year", type=int, required=True, help="Reference year.")
    decode.add_argument("--month", type=int, required=True, help="Reference month (1-12).")
    decode.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a weekday does not match its date.",
    )

    recover = sub.add_parser(
        "recover", help="Pass text through, or convert a JSON answer to annotated text."
    )
    recover.add_argument("input", help="Response file, or '-' for stdin.")

    return parser.parse_args(argv)


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def run(args: argparse.Namespace) -> str:
    """Execute the selected command and return what should go to stdout."""
    config = get_config()
    scope = args.scope or config.merge_code_scope
    raw = _read_input(args.input)

    if args.command == "encode":
        days = schedule_from_json(json.loads(raw))
        if args.fill_month:
            days = fill_month(days)
        return encode_schedule(
            days, scope=scope, unknown=config.unknown_activity, strict=args.strict
        )

    if args.command == "decode":
        days = decode_text(raw, args.year, args.month, strict=args.strict)
        return json.dumps(schedule_to_json(days), indent=2)

    return RecoveryGate(scope=scope, unknown=config.unknown_activity).process(raw)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    try:
        output = run(args)
    except (TranscoderError, ValidationError, json.JSONDecodeError, OSError) as e:
        _log(f"ERROR: {e}")
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
