"""Main application entry point for SpeechStream."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import SpeechStreamConfig
from .events import SpeechEventPublisher
from .models import StreamingConfig
from .services import SpeechService
from .ui import ConsoleRenderer

logger = logging.getLogger(__name__)


def setup_logging(config: SpeechStreamConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path')
    console_output = config.get('logging.console_output', True)

    handlers = []

    # File handler - only when a log file is configured
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        ))
        handlers.append(file_handler)

    # Console handler - only warnings and above, the transcript owns stdout
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("SpeechStream starting up")
    logger.info(f"Log file: {log_file_path or '(none)'}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_streaming_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect streaming options given on the command line."""
    overrides = {
        "chunk_duration_seconds": args.chunk_duration,
        "overlap_duration_seconds": args.overlap,
        "language": args.language,
        "max_chunks": args.max_chunks,
        "hot_word_phrase": args.hot_word,
    }
    if args.no_hot_word:
        overrides["hot_word_enabled"] = False
    return {key: value for key, value in overrides.items() if value is not None}


async def run_session(service: SpeechService,
                      renderer: ConsoleRenderer,
                      streaming_config: StreamingConfig,
                      duration: Optional[float]) -> Dict[str, Any]:
    """Record until the duration elapses or the session stops itself.

    Returns:
        Result dictionary of the start failure or of the stop
    """
    result = await service.start_streaming_recording(streaming_config)
    if not result["success"]:
        return result

    renderer.show_status("🔴 Recording... (Ctrl+C to cancel)")
    try:
        await asyncio.wait_for(renderer.finished.wait(), timeout=duration)
    except asyncio.TimeoutError:
        logger.info(f"Recording duration of {duration}s elapsed")

    if service.is_recording():
        renderer.show_status("⏹️  Finishing transcription...")
        return await service.stop_streaming_recording()

    return {
        "success": True,
        "final_text": renderer.final_text,
        "total_chunks": renderer.total_chunks,
    }


def main() -> None:
    """Main entry point for SpeechStream."""
    parser = argparse.ArgumentParser(
        description="SpeechStream - streaming voice dictation",
        epilog="Say the hot word phrase to finish and send the message."
    )
    parser.add_argument("--config", type=str, help="Path to configuration YAML file")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: logging.level from config, else INFO)"
    )
    parser.add_argument("--duration", type=float, help="Stop after this many seconds (default: until hot word)")
    parser.add_argument("--chunk-duration", type=float, help="Seconds of audio per chunk")
    parser.add_argument("--overlap", type=float, help="Seconds of overlap between chunks")
    parser.add_argument("--language", type=str, help="Language hint, e.g. 'en'")
    parser.add_argument("--max-chunks", type=int, help="Stop after this many chunks (0 = unbounded)")
    parser.add_argument("--hot-word", type=str, help="Phrase that ends and sends the message")
    parser.add_argument("--no-hot-word", action="store_true", help="Disable hot word detection")
    parser.add_argument("--version", action="version", version="SpeechStream v0.1.0")

    args = parser.parse_args()

    try:
        config = SpeechStreamConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)

    setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

    events = SpeechEventPublisher()
    service = SpeechService.from_config(config, events)
    renderer = ConsoleRenderer(events)
    streaming_config = config.get_streaming_config(build_streaming_overrides(args))

    try:
        result = asyncio.run(run_session(service, renderer, streaming_config, args.duration))
    except KeyboardInterrupt:
        service.dispose()
        print("\n👋 Recording cancelled")
        return
    except Exception as e:
        service.dispose()
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        renderer.close()

    if not result["success"]:
        print(f"❌ {result['error']}")
        sys.exit(1)

    renderer.show_summary()


if __name__ == "__main__":
    main()
