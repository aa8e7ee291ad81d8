#!/usr/bin/env python3
"""
VobSrt Batch Processing Entry Point

Converts every IDX/SUB pair in a directory, smallest first, writing one
SRT per pair into an output folder.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional, Tuple

# Progress bar library
from tqdm import tqdm

from vobsrt.config_loader import ConfigLoader
from vobsrt.log_setup import setup_logging
from vobsrt.cli import build_components
from vobsrt.recognizer import RECOGNITION_LEVELS
from vobsrt.exceptions import VobSrtError, ConfigurationError, FileSystemError
from vobsrt.utils import companion_payload_path, ensure_dir_exists

# Initialize logger for this script
logger = logging.getLogger(__name__)

def find_and_sort_indexes(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all .idx files that have a companion .sub and sorts them by payload size.

    Args:
        input_dir: The directory to search for subtitle files.

    Returns:
        A list of (idx_path, sub_size) tuples, smallest payload first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    indexes = []
    logger.info(f"Scanning directory for IDX files: {input_dir}")
    for filename in os.listdir(input_dir):
        if not filename.lower().endswith(".idx"):
            continue
        idx_path = os.path.join(input_dir, filename)
        sub_path = companion_payload_path(idx_path)
        try:
            if os.path.isfile(idx_path) and os.path.isfile(sub_path):
                indexes.append((idx_path, os.path.getsize(sub_path)))
            else:
                logger.warning(f"No SUB file next to {idx_path}. Skipping.")
        except OSError as e:
            logger.warning(f"Could not access file {idx_path}: {e}. Skipping.")

    indexes.sort(key=lambda item: item[1])
    logger.info(f"Found {len(indexes)} IDX/SUB pairs. Sorted by size (smallest first).")
    return indexes


def run_batch_processing(argv: Optional[List[str]] = None) -> None:
    """Parses arguments, sets up, and runs the batch conversion."""
    parser = argparse.ArgumentParser(
        description="VobSrt Batch: Convert every IDX/SUB pair in a directory to SRT.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing the IDX/SUB files."
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Directory for the SRT files. Defaults to <input-dir>/Subs."
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to a configuration YAML file (config.yaml is used if present)."
    )
    parser.add_argument(
        "-q", "--quality",
        default="fast",
        choices=RECOGNITION_LEVELS,
        help="OCR quality level."
    )
    parser.add_argument(
        "--temp-dir",
        default=None, # Default taken from config file
        help="Override the parent directory for per-run working directories."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )

    args = parser.parse_args(argv)

    # --- Setup Logging (Initial) ---
    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir=None, log_file=None)

    # --- Load Configuration ---
    try:
        config = ConfigLoader().load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}")
        sys.exit(1)

    # --- Re-configure Logging (Final) ---
    setup_logging(log_level=log_level, log_dir=config.get('log_dir'), log_file='vobsrt_batch.log')

    if args.temp_dir:
        logger.info(f"Overriding temp_dir from config with CLI argument: {args.temp_dir}")
        config['temp_dir'] = args.temp_dir

    # --- Find and Sort Inputs ---
    try:
        sorted_indexes = [item[0] for item in find_and_sort_indexes(args.input_dir)]
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)
    if not sorted_indexes:
        logger.warning(f"No IDX/SUB pairs found in {args.input_dir}. Exiting.")
        sys.exit(0)

    output_dir = args.output_dir or os.path.join(args.input_dir, "Subs")
    try:
        ensure_dir_exists(output_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        sys.exit(1)

    # --- Initialize Components (ONCE) ---
    try:
        converter = build_components(config)
    except VobSrtError as e:
        logger.critical(f"Failed to initialize VobSrt components: {e}")
        sys.exit(1)

    total_files = len(sorted_indexes)
    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()

    logger.info(f"--- Starting Batch Conversion for {total_files} files ---")

    with tqdm(total=total_files, unit="file", desc="Starting Batch") as pbar:
        for idx_path in sorted_indexes:
            idx_filename = os.path.basename(idx_path)
            pbar.set_description(f"Processing: {idx_filename[:30]}...")
            output_path = os.path.join(output_dir, os.path.splitext(idx_filename)[0] + ".srt")
            try:
                summary = converter.convert(idx_path, output_path, quality=args.quality)
                logger.info(f"Wrote {len(summary.entries)} entries for {idx_filename} to {output_path}")
                files_processed += 1
            except VobSrtError as e:
                logger.error(f"VobSrt failed for '{idx_filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                sys.exit(1)
            finally:
                pbar.update(1) # Increment progress bar regardless of success/failure

    batch_end_time = time.time()
    logger.info("--- Batch Conversion Finished ---")
    logger.info(f"Total time: {batch_end_time - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{total_files} files")
    logger.info(f"Failed: {files_failed}/{total_files} files")

    sys.exit(1 if files_failed > 0 else 0)


if __name__ == "__main__":
    run_batch_processing()
