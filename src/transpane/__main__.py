"""Command-line entry point for transpane.

This module is executed when running:
- python -m transpane
- transpane (via pyproject.toml entry point)
"""

import argparse
import asyncio
import sys

from . import log
from .capture import ImageFileCapture
from .config import Config
from .errors import TranspaneError
from .layout import LayoutMode
from .pipeline import Pipeline, PipelineResult
from .privacy import PrivacyMode

logger = log.get_logger("cli")


def _parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="transpane",
        description="Screen and text translation through pluggable OCR and translation backends",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config file (default: config.yml or ~/.transpane/config.yml)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--privacy", "-p",
        type=str,
        choices=[mode.value for mode in PrivacyMode],
        default=None,
        help="Privacy mode (overrides config)"
    )
    parser.add_argument(
        "--target", "-t",
        type=str,
        default=None,
        help="Target language code (overrides config)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    image = commands.add_parser("image", help="Recognize and translate an image file")
    image.add_argument("path", help="Image file to translate")

    text = commands.add_parser("text", help="Translate text")
    text.add_argument("text", help="Text to translate")
    text.add_argument("--stream", action="store_true", help="Print output as it arrives")

    commands.add_parser("backends", help="List translation providers and OCR engines")

    return parser.parse_args(argv)


def _print_result(result: PipelineResult, pipeline: Pipeline) -> int:
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    if result.skipped:
        print("(no text)")
        return 0

    if result.mode is LayoutMode.SCATTERED:
        for pane in pipeline.session.panes:
            box = pane.bbox
            status = pane.translated_text or f"[{pane.status.value}] {pane.error or ''}".strip()
            print(f"[{box.x},{box.y} {box.width}x{box.height}] {status}")
    else:
        print(result.text)

    logger.info(
        "done",
        mode=result.mode.value,
        provider=result.provider,
        engine=result.engine,
        blocks=result.block_count,
    )
    return 0


def _list_backends(pipeline: Pipeline) -> int:
    privacy = pipeline.privacy.get_mode()
    for title, manager in (("Translation providers", pipeline.translation), ("OCR engines", pipeline.ocr)):
        print(title)
        priority = manager.get_priority(pipeline.usage_mode)
        for status in manager.status(privacy):
            descriptor = status.descriptor
            flags = [
                "network" if descriptor.requires_network else "local",
                descriptor.latency_class.value,
            ]
            if descriptor.supports_streaming:
                flags.append("streaming")
            state = "configured" if status.configured else f"missing: {', '.join(status.missing)}"
            if not status.allowed:
                state = f"blocked by {privacy.value} mode"
            rank = f"#{priority.index(descriptor.id) + 1}" if descriptor.id in priority else "  "
            print(f"  {rank:>3} {descriptor.id:<12} {descriptor.name:<12} [{', '.join(flags)}] {state}")
        print()
    return 0


async def _run(args: argparse.Namespace, config: Config) -> int:
    pipeline = Pipeline.from_config(config, capture=ImageFileCapture())
    try:
        if args.command == "backends":
            return _list_backends(pipeline)

        if args.command == "image":
            result = await pipeline.run_from_capture({"path": args.path})
            return _print_result(result, pipeline)

        if args.stream:
            printed = []

            def on_chunk(chunk: str) -> None:
                printed.append(chunk)
                print(chunk, end="", flush=True)

            result = await pipeline.run_from_text(args.text, stream=True, on_chunk=on_chunk)
            # Text shown as-is is never streamed
            if printed and result.success:
                print()
                return 0
        else:
            result = await pipeline.run_from_text(args.text)
        return _print_result(result, pipeline)
    finally:
        await pipeline.aclose()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parse_arguments(argv)
    log.configure(debug=args.debug)

    try:
        config = Config.load(args.config)
    except TranspaneError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    # Override with CLI arguments
    if args.privacy:
        config.privacy_mode = PrivacyMode.parse(args.privacy)
    if args.target:
        config.target_language = args.target

    try:
        return asyncio.run(_run(args, config))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
