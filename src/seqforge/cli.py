"""Command-line interface for seqforge."""

import argparse
import asyncio
import json
import logging
import sys

from seqforge import __version__
from seqforge.actions import GenerateSequenceAction, Message, RuntimeContext, StreamMemory
from seqforge.generation import (
    CREDENTIAL_SETTING,
    InputParser,
    RequestBuilder,
    RequestValidationError,
    get_generation_config,
)
from seqforge.logging_config import configure_logging
from seqforge.traits import MappingTableError, SequenceDecoder, load_mapping_table


def _cmd_parse(parsed: argparse.Namespace) -> int:
    fields = InputParser().parse(parsed.text)
    if fields is None:
        print("No request found. Try: starting with ATG, length 50", file=sys.stderr)
        return 1
    try:
        request = RequestBuilder(get_generation_config().get_request_defaults()).build(fields)
    except RequestValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 1
    print(json.dumps(request.to_payload(), indent=2))
    return 0


def _cmd_generate(parsed: argparse.Namespace) -> int:
    config = get_generation_config()
    settings = {CREDENTIAL_SETTING: key} if (key := config.get_api_key()) else {}
    context = RuntimeContext(memory=StreamMemory(sys.stdout), settings=settings)
    action = GenerateSequenceAction(config=config)
    message = Message(text=parsed.text, conversation_id=parsed.conversation_id)

    if not action.validate(context, message):
        print("Message is not a DNA generation request.", file=sys.stderr)
        return 1

    outcome = asyncio.run(action.run(context, message))
    return 0 if outcome.error_kind is None else 1


def _cmd_decode(parsed: argparse.Namespace) -> int:
    try:
        table = load_mapping_table(parsed.table)
    except MappingTableError as e:
        print(str(e), file=sys.stderr)
        return 1
    try:
        record = SequenceDecoder().decode(parsed.sequence, table, parsed.chunk_size)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(record.to_json())
    return 0


def main(args: list[str] | None = None) -> int:
    """Run the seqforge CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(
        prog="seqforge",
        description="seqforge - chat-driven DNA sequence generation",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Show the request a message would produce")
    parse_cmd.add_argument("text", help='Request text, e.g. "starting with ATG, length 50"')
    parse_cmd.set_defaults(func=_cmd_parse)

    generate_cmd = subparsers.add_parser("generate", help="Generate a sequence from a message")
    generate_cmd.add_argument("text", help="Request text")
    generate_cmd.add_argument(
        "--conversation-id",
        default="cli",
        help="Conversation id the outcome is written under (default: cli)",
    )
    generate_cmd.set_defaults(func=_cmd_generate)

    decode_cmd = subparsers.add_parser("decode", help="Decode a sequence into traits")
    decode_cmd.add_argument("sequence", help="Nucleotide sequence")
    decode_cmd.add_argument("--table", required=True, help="JSON mapping table")
    decode_cmd.add_argument(
        "--chunk-size",
        type=int,
        default=4,
        help="Chunk length (default: 4)",
    )
    decode_cmd.set_defaults(func=_cmd_decode)

    parsed = parser.parse_args(args)

    level = getattr(logging, parsed.log_level) if parsed.log_level else None
    configure_logging(level=level)

    return parsed.func(parsed)


if __name__ == "__main__":
    sys.exit(main())
