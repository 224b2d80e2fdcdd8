from __future__ import annotations

import argparse
import logging
import time
from typing import Optional

import sounddevice as sd

from .config import AudioConfig, ConfigError
from .detector import PitchDetector
from .pitch import DetectionResult
from .ui import PygameUI, TunerState

logger = logging.getLogger("pitchdetect")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    defaults = AudioConfig()
    parser = argparse.ArgumentParser(description="Real-time autocorrelation pitch detector")
    parser.add_argument("--device", help="Audio input device (index or name)")
    parser.add_argument("--samplerate", type=int, default=defaults.sample_rate, help="Sample rate")
    parser.add_argument("--blocksize", type=int, default=defaults.block_size, help="Audio block size")
    parser.add_argument("--length", type=int, default=2048, help="Analysis window length in samples")
    parser.add_argument("--min-note", type=float, help="Lowest MIDI note to detect (overrides --min-frequency)")
    parser.add_argument("--max-note", type=float, help="Highest MIDI note to detect (overrides --max-frequency)")
    parser.add_argument("--min-frequency", type=float, default=defaults.min_freq, help="Lowest frequency to detect (Hz)")
    parser.add_argument("--max-frequency", type=float, default=defaults.max_freq, help="Highest frequency to detect (Hz)")
    parser.add_argument("--min-rms", type=float, default=0.01, help="Minimum window RMS")
    parser.add_argument(
        "--min-correlation",
        type=float,
        default=defaults.corr_threshold,
        help="Stop the scan once a peak exceeds this (0 disables)",
    )
    parser.add_argument(
        "--min-correlation-increase", type=float, help="Stop the scan once a peak rises this far above its trough"
    )
    parser.add_argument(
        "--normalize",
        choices=["rms", "peak", "off"],
        default=defaults.normalize,
        help="Normalize differences by RMS or peak",
    )
    parser.add_argument("--no-interpolate", action="store_true", help="Report integer-period frequencies")
    parser.add_argument("--once", action="store_true", help="Stop after the first detection")
    parser.add_argument("--debug", action="store_true", help="Publish the correlation curve for every window")
    parser.add_argument("--headless", action="store_true", help="No UI, log detections instead")
    parser.add_argument("--fullscreen", action="store_true", help="Fullscreen UI")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def build_detector(args: argparse.Namespace, audio_cfg: AudioConfig) -> PitchDetector:
    options = audio_cfg.detector_options()
    options.update(
        min_note=args.min_note,
        max_note=args.max_note,
        min_correlation=args.min_correlation or None,
        min_correlation_increase=args.min_correlation_increase,
    )
    return PitchDetector(
        length=args.length,
        min_rms=args.min_rms,
        interpolate_frequency=not args.no_interpolate,
        stop_after_detection=args.once,
        debug=args.debug or not args.headless,
        **{name: value for name, value in options.items() if value is not None},
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    device = int(args.device) if args.device and args.device.isdigit() else args.device
    audio_cfg = AudioConfig(
        sample_rate=args.samplerate,
        block_size=args.blocksize,
        device=device,
        min_freq=args.min_frequency,
        max_freq=args.max_frequency,
        corr_threshold=args.min_correlation,
        normalize=None if args.normalize == "off" else args.normalize,
    )

    try:
        detector = build_detector(args, audio_cfg)
    except ConfigError as exc:
        logger.error("Invalid options: %s", exc)
        return 2

    if args.headless:
        detector.on_detect = _log_detection

    stream = sd.InputStream(
        channels=audio_cfg.channels,
        samplerate=audio_cfg.sample_rate,
        blocksize=audio_cfg.block_size,
        device=audio_cfg.device,
        dtype="float32",
        callback=detector.callback,
    )

    ui: Optional[PygameUI] = None
    if not args.headless:
        ui = PygameUI(fullscreen=args.fullscreen)

    logger.info("Listening on %s at %d Hz, window %d", audio_cfg.device or "default input", audio_cfg.sample_rate, args.length)
    with stream:
        detector.start()
        running = True
        try:
            while running:
                detector.poll()
                if ui:
                    running = ui.update(_build_tuner_state(detector))
                else:
                    time.sleep(0.01)
                    running = detector.started
        except KeyboardInterrupt:
            pass
        finally:
            if detector.callback.status_errors:
                logger.warning("Skipped %d audio blocks with stream errors", detector.callback.status_errors)
            detector.destroy()

    if detector.events.dropped:
        logger.warning("Dropped %d detector events", detector.events.dropped)
    if ui:
        ui.close()
    return 0


def _log_detection(result: DetectionResult, detector: PitchDetector) -> None:
    logger.info(
        "%-4s %8.2f Hz %+4d cents (period %d, correlation %.3f, rms %.3f)",
        detector.note_string,
        result.frequency,
        detector.detune,
        result.best_period,
        result.best_correlation,
        result.rms,
    )


def _build_tuner_state(detector: PitchDetector) -> TunerState:
    stats = detector.stats
    return TunerState(
        note=detector.note_string,
        frequency=stats.frequency,
        detune=detector.detune,
        correlation=stats.best_correlation,
        rms=detector.debug.rms,
        correlations=detector.correlations,
        best_period=detector.debug.best_period,
    )


if __name__ == "__main__":
    raise SystemExit(main())
