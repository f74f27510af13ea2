"""
hotwordkit CLI - Terminal interface for hotword detection.

Runs hotword detection against the microphone or audio files, lists
models and input devices, and writes configuration templates.
"""

import sys
import os
import time
import argparse
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import colorama
from colorama import Fore, Style

import hotwordkit
from hotwordkit.core import AudioFileSource, Detector, HotwordKitError, MicrophoneSource
from hotwordkit.core.audio import list_audio_devices
from hotwordkit.utils.config import (
    builder_from_config,
    create_config_template,
    load_config,
    load_config_with_defaults,
    merge_configs,
)
from hotwordkit.utils.file_utils import list_audio_files, list_model_files

colorama.init()


class TerminalFormatter(logging.Formatter):
    """Custom formatter for terminal-style logging."""

    def format(self, record):
        timestamp = self.formatTime(record, '%H:%M:%S')
        level_colors = {
            'DEBUG': Fore.CYAN,
            'INFO': Fore.GREEN,
            'WARNING': Fore.YELLOW,
            'ERROR': Fore.RED,
            'CRITICAL': Fore.MAGENTA + Style.BRIGHT
        }

        level_color = level_colors.get(record.levelname, Fore.WHITE)

        return (f"{Fore.WHITE}[{timestamp}] "
                f"{level_color}[{record.levelname:^8}] "
                f"{Fore.WHITE}{record.getMessage()}{Style.RESET_ALL}")


class ConsoleHandler:
    """Prints detections to the terminal."""

    def __init__(self):
        self.count = 0

    def detected(self, keyword: str) -> None:
        self.count += 1
        timestamp = time.strftime('%H:%M:%S')
        if keyword == 'silence':
            print(f"{Fore.WHITE}{Style.DIM}[{timestamp}] ... silence{Style.RESET_ALL}")
        else:
            print(f"{Fore.GREEN}{Style.BRIGHT}[{timestamp}] HOTWORD DETECTED: "
                  f"{keyword}{Style.RESET_ALL}")


class HotwordKitCLI:
    """
    hotwordkit Command Line Interface.

    Terminal-style interface for running hotword detection and managing
    detection resources.
    """

    def __init__(self, verbose: bool = False):
        self.detector: Optional[Detector] = None
        self.verbose = verbose
        self.setup_logging()

    def setup_logging(self):
        """Setup terminal-style logging."""
        logger = logging.getLogger()
        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(TerminalFormatter())
        logger.addHandler(handler)

    def print_banner(self):
        print(f"\n{Fore.CYAN}{Style.BRIGHT}hotwordkit {hotwordkit.__version__}{Style.RESET_ALL} "
              f"{Fore.WHITE}{Style.DIM}- hotword detection on Snowboy{Style.RESET_ALL}")
        print("─" * 48)

    def print_section_header(self, title: str, subtitle: str = ""):
        """Print styled section header."""
        print(f"\n{Fore.YELLOW}{Style.BRIGHT}▶ {title.upper()}{Style.RESET_ALL}")
        if subtitle:
            print(f"{Fore.WHITE}{Style.DIM}  {subtitle}{Style.RESET_ALL}")
        print(f"{Fore.YELLOW}{'─' * (len(title) + 2)}{Style.RESET_ALL}")

    def build_config(self, args) -> Dict[str, Any]:
        """Combine the config file (if any) with command line overrides."""
        if args.config:
            config = merge_configs(load_config_with_defaults(), load_config(args.config))
        else:
            config = load_config_with_defaults()

        detector = config['detector']
        if args.resource:
            detector['resource'] = args.resource
        if args.gain is not None:
            detector['audio_gain'] = args.gain
        if args.chunk_size is not None:
            detector['chunk_size'] = args.chunk_size

        for model in args.model or []:
            config['hotwords'].append({'model': model, 'sensitivity': args.sensitivity})

        if args.silence_threshold is not None:
            config['silence'] = {'enabled': True, 'threshold': args.silence_threshold}
        if args.device_id is not None:
            config['audio']['device_id'] = args.device_id

        return config

    def detect(self, args) -> bool:
        """Run hotword detection on the microphone or on audio files."""
        config = self.build_config(args)
        handler = ConsoleHandler()
        builder = builder_from_config(config, handler)
        if builder.silence_handler is None:
            # The engine reports quiet audio as silence; drop it unless reporting was asked for
            builder.handle_silence_func(0, lambda keyword: None)

        names = ", ".join(h.name for h in builder.registry) or "(none)"
        self.print_section_header("Hotword Detection", f"Hotwords: {names}")

        self.detector = builder.start()
        try:
            audio_format = self.detector.audio_format()
            print(f"{Fore.CYAN}[ENGINE]{Style.RESET_ALL} {audio_format.sample_rate}Hz, "
                  f"{audio_format.channels} channel(s), {audio_format.bits_per_sample}-bit")

            if args.input:
                self.detect_files(args.input)
            else:
                self.detect_microphone(config['audio']['device_id'])
        finally:
            self.print_stats()
            if self.detector.initialized and not self.detector.closed:
                self.detector.close()

        return True

    def detect_files(self, input_path: str):
        if os.path.isdir(input_path):
            files = list_audio_files(input_path)
        else:
            files = [input_path]

        if not files:
            print(f"{Fore.YELLOW}⚠ No audio files found{Style.RESET_ALL}")
            return

        audio_format = self.detector.audio_format()
        for file_path in files:
            print(f"{Fore.CYAN}[FILE]{Style.RESET_ALL} {Path(file_path).name}")
            if file_path.endswith('.raw'):
                with open(file_path, 'rb') as f:
                    self.detector.read_and_detect(f)
            else:
                source = AudioFileSource.for_format(file_path, audio_format)
                try:
                    self.detector.read_and_detect(source)
                finally:
                    source.close()

    def detect_microphone(self, device_id: Optional[int]):
        source = MicrophoneSource.for_format(self.detector.audio_format(), device_id)
        print(f"{Fore.GREEN}[READY]{Style.RESET_ALL} Listening for hotwords...")
        print(f"{Fore.WHITE}{Style.DIM}Press Ctrl+C to stop{Style.RESET_ALL}")

        with source:
            try:
                self.detector.read_and_detect(source)
            except KeyboardInterrupt:
                print(f"\n{Fore.YELLOW}[STOP]{Style.RESET_ALL} Stopping detection...")

    def print_stats(self):
        if self.detector is None:
            return

        stats = self.detector.get_stats()
        print(f"\n{Fore.CYAN}[STATS]{Style.RESET_ALL} Final Statistics:")
        print(f"  Chunks processed: {stats['chunks_routed']}")
        print(f"  Total detections: {stats['total_detections']}")
        for keyword, count in stats['detections'].items():
            print(f"    {keyword}: {count}")
        print(f"  Silence events: {stats['silence_events']}")
        print(f"  Runtime: {stats['runtime_seconds']:.1f}s")

    def list_models(self, model_dir: str):
        """List available models."""
        self.print_section_header("Available Models", f"Scanning {model_dir}")

        models = list_model_files(model_dir)
        if not models:
            print(f"{Fore.YELLOW}⚠ No models found in {model_dir}{Style.RESET_ALL}")
            return

        print(f"\n{Fore.CYAN}{Style.BRIGHT}{'NAME':<20} {'TYPE':<10} {'SIZE':<10} {'MODIFIED':<20}{Style.RESET_ALL}")
        print("─" * 62)

        for model in models:
            created = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(model['created']))
            color = Fore.WHITE if model['valid'] else Fore.RED
            print(f"{color}{model['name']:<20} "
                  f"{Fore.CYAN}{model['type']:<10} "
                  f"{Fore.YELLOW}{model['size_kb']:.1f}KB{'':<3} "
                  f"{Fore.WHITE}{Style.DIM}{created}{Style.RESET_ALL}")

    def list_devices(self):
        """List available audio input devices."""
        self.print_section_header("Audio Devices")

        devices = list_audio_devices()

        print(f"{Fore.CYAN}{Style.BRIGHT}{'ID':<4} {'NAME':<40} {'CHANNELS':<10} {'RATE':<10}{Style.RESET_ALL}")
        print("─" * 64)

        for device in devices:
            print(f"{Fore.YELLOW}{device['id']:<4} "
                  f"{Fore.WHITE}{device['name'][:38]:<40} "
                  f"{Fore.CYAN}{device['channels']:<10} "
                  f"{Fore.GREEN}{int(device['sample_rate']):<10}{Style.RESET_ALL}")

    def init_config(self, output: str, format: str) -> bool:
        if create_config_template(output, format):
            print(f"{Fore.GREEN}[SUCCESS]{Style.RESET_ALL} Configuration template written to {output}")
            return True
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Could not write {output}")
        return False


def create_parser():
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="hotwordkit",
        description="hotwordkit - Hotword detection on Snowboy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hotwordkit detect --resource resources/common.res --model resources/snowboy.umdl
  hotwordkit detect --config hotwords.yaml --input recording.wav --silence-threshold 2
  hotwordkit list-models --model-dir resources/models
  hotwordkit list-devices
  hotwordkit init-config --output hotwords.yaml
        """
    )
    parser.add_argument('--verbose', action='store_true', help='Show debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    detect_parser = subparsers.add_parser('detect', help='Run hotword detection')
    detect_parser.add_argument('--config', help='YAML or JSON configuration file')
    detect_parser.add_argument('--resource', help='Path to the engine resource bundle (common.res)')
    detect_parser.add_argument('--model', action='append', help='Hotword model file (repeatable)')
    detect_parser.add_argument('--sensitivity', type=float,
                               default=hotwordkit.get_config('default_sensitivity'),
                               help='Sensitivity for --model hotwords (0.0-1.0)')
    detect_parser.add_argument('--gain', type=float, help='Audio gain multiplier')
    detect_parser.add_argument('--chunk-size', type=int, help='Bytes per detection call')
    detect_parser.add_argument('--silence-threshold', type=float,
                               help='Report silence after this many seconds')
    detect_parser.add_argument('--input', help='Audio file or directory instead of the microphone')
    detect_parser.add_argument('--device-id', type=int, help='Audio input device ID')

    list_models_parser = subparsers.add_parser('list-models', help='List hotword models')
    list_models_parser.add_argument('--model-dir', default='./resources/models',
                                    help='Directory containing .umdl/.pmdl files')

    subparsers.add_parser('list-devices', help='List available audio input devices')

    init_parser = subparsers.add_parser('init-config', help='Write a configuration template')
    init_parser.add_argument('--output', default='hotwords.yaml', help='Output path')
    init_parser.add_argument('--format', choices=['yaml', 'json'], default='yaml')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    hotwordkit.set_config('verbose', args.verbose)
    cli = HotwordKitCLI(verbose=args.verbose)
    cli.print_banner()

    try:
        if args.command == 'detect':
            success = cli.detect(args)
        elif args.command == 'list-models':
            cli.list_models(args.model_dir)
            success = True
        elif args.command == 'list-devices':
            cli.list_devices()
            success = True
        elif args.command == 'init-config':
            success = cli.init_config(args.output, args.format)
        else:
            print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Unknown command: {args.command}")
            success = False

        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}[INTERRUPTED]{Style.RESET_ALL} Operation cancelled by user")
        sys.exit(130)
    except (HotwordKitError, RuntimeError, OSError, ValueError) as e:
        print(f"{Fore.RED}[FATAL]{Style.RESET_ALL} {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
