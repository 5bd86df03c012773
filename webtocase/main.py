import argparse
import asyncio
import sys
from pathlib import Path

from webtocase.backend.client import WebToCaseClient
from webtocase.backend.exceptions import ApiError
from webtocase.config.settings import Settings
from webtocase.files.exceptions import FileReadError
from webtocase.files.file_loader import FileLoader
from webtocase.files.models import Attachment
from webtocase.frontend.connector import FormConnector
from webtocase.frontend.widget import FormWidget
from webtocase.logging.logger import Log
from webtocase.submission.models import SubmissionOutcome
from webtocase.submission.pipeline import build_pipeline


def parse_field(pair: str) -> tuple[str, str]:
    name, sep, value = pair.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got '{pair}'")
    return name.strip(), value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webtocase",
        description="Submit a public web form and create a case record.",
    )
    parser.add_argument("form_name", help="Public name of the form")
    parser.add_argument(
        "--field",
        dest="fields",
        action="append",
        type=parse_field,
        default=[],
        metavar="NAME=VALUE",
        help="Field value; repeat for several fields",
    )
    parser.add_argument("--file", type=Path, help="Attachment to upload")
    parser.add_argument(
        "--markup",
        type=Path,
        help="HTML of an existing host form to read fields and values from",
    )
    return parser


async def run(
    args: argparse.Namespace,
    settings: Settings,
    attachment: Attachment | None,
) -> SubmissionOutcome:
    async with WebToCaseClient(
        api_base=settings.api_base,
        timeout_seconds=settings.request_timeout_seconds,
    ) as client:
        pipeline = build_pipeline(settings, args.form_name, client)
        values = dict(args.fields)
        if args.markup is not None:
            connector = FormConnector(pipeline)
            try:
                await connector.connect()
                markup = args.markup.read_text(encoding="utf-8")
                return await connector.submit_markup(markup, attachment, overrides=values)
            finally:
                connector.close()
        widget = FormWidget(pipeline)
        try:
            await widget.load()
            return await widget.submit(values, attachment)
        finally:
            widget.close()


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> read attachment -> run one submission."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    attachment = None
    if args.file is not None:
        try:
            attachment = FileLoader().load(args.file)
        except FileReadError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    try:
        outcome = asyncio.run(run(args, settings, attachment))
    except (ApiError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not outcome.succeeded:
        print(f"Error: {outcome.message}", file=sys.stderr)
        return 1
    print(outcome.message)
    print(f"Reference: {outcome.case_number}")
    if outcome.warning:
        print(f"Warning: {outcome.warning}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
