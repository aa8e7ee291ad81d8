"""Command-Line Interface handler for VobSrt."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader
from .log_setup import setup_logging
from .renderer import FFmpegRenderer
from .recognizer import TesseractRecognizer, RECOGNITION_LEVELS
from .converter import VobSubConverter
from .exceptions import VobSrtError, ConfigurationError, EmptyResultError, InputAccessError
from .utils import companion_payload_path

logger = logging.getLogger(__name__) # Get logger for this module

class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit code 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")

def build_components(config: dict) -> VobSubConverter:
    """Creates a converter wired to ffmpeg and Tesseract from config."""
    renderer = FFmpegRenderer(ffmpeg_path=config.get('ffmpeg_path'))
    recognizer = TesseractRecognizer(tesseract_cmd=(config.get('ocr') or {}).get('tesseract_cmd'))
    return VobSubConverter(config=config, renderer=renderer, recognizer=recognizer)

class CLIHandler:
    """Parses arguments and orchestrates the VobSrt process."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = _ArgumentParser(
            description="VobSrt: Convert VobSub (IDX/SUB) subtitle files to SRT using ffmpeg and OCR.",
            epilog="The .sub file must sit next to the .idx file with the same base name. "
                   "Requires ffmpeg and tesseract on PATH (or configured).",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        parser.add_argument(
            "-i", "--input",
            required=True,
            help="Path to the input IDX file."
        )
        parser.add_argument(
            "-o", "--output",
            required=True,
            help="Path for the output SRT file."
        )
        parser.add_argument(
            "-v", "--verbose",
            action="store_true",
            help="Enable verbose (DEBUG) logging."
        )
        parser.add_argument(
            "-q", "--quality",
            default="fast",
            choices=RECOGNITION_LEVELS,
            help="OCR quality level."
        )
        parser.add_argument(
            "-c", "--config",
            default=None,
            help="Path to a configuration YAML file (config.yaml is used if present)."
        )
        parser.add_argument(
            "--temp-dir",
            default=None, # Default taken from config file
            help="Override the parent directory for the per-run working directory."
        )
        return parser

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the converter."""
        args = self.parser.parse_args(argv)

        # --- Setup Logging ---
        log_level = logging.DEBUG if args.verbose else logging.INFO
        # Console only until the config tells us where the log file goes
        setup_logging(log_level=log_level, log_dir=None, log_file=None)

        # --- Load Configuration ---
        try:
            config = ConfigLoader().load_config(args.config)
        except ConfigurationError as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}")
            sys.exit(1)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {args.config}")
            sys.exit(1)

        # --- Re-configure Logging with settings from Config ---
        setup_logging(log_level=log_level, log_dir=config.get('log_dir'), log_file=config.get('log_file'))

        # --- Apply CLI Overrides ---
        if args.temp_dir:
            logger.info(f"Overriding temp_dir from config with CLI argument: {args.temp_dir}")
            config['temp_dir'] = args.temp_dir

        logger.debug(f"Input IDX file: {args.input}")
        logger.debug(f"Output SRT file: {args.output}")

        # --- Validate Input Paths ---
        if not os.path.isfile(args.input):
            logger.critical(f"Cannot access IDX file: {args.input}")
            sys.exit(1)
        payload_path = companion_payload_path(args.input)
        if not os.path.isfile(payload_path):
            logger.critical(f"Cannot access SUB file: {payload_path}")
            logger.critical("SUB file must be in the same directory as IDX file")
            sys.exit(1)

        # --- Instantiate Components and Run ---
        try:
            converter = build_components(config)
            summary = converter.convert(args.input, args.output, quality=args.quality, payload_path=payload_path)
            logger.info("Conversion complete!")
            logger.info(f"  - Measured {summary.timeline_entries} timeline entries")
            logger.info(f"  - Extracted {summary.frames} subtitle frames")
            logger.info(f"  - Generated {len(summary.entries)} SRT entries")
            logger.info(f"  - SRT output: {summary.output_path}")
            sys.exit(0)

        except EmptyResultError as e:
            logger.error(f"Nothing to write: {e}")
            sys.exit(1)
        except InputAccessError as e:
            logger.error(str(e))
            sys.exit(1)
        except VobSrtError as e:
            # Catch errors originating from our application logic
            logger.error(f"A VobSrt error occurred: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            # Catch any other unexpected errors
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(1)

def main() -> None:
    CLIHandler().run()
