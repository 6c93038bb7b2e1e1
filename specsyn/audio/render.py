"""Offline WAV rendering for SpecSyn.

Usage:
    python -m specsyn.audio.render output.wav [--state "#sampleRate=48000&..."]
        [--preset preset.json] [--analyze input.wav [--f0 220]]

The state is built in layers: defaults, then the URL state string, then the
preset file, then analysis of an input recording, then command line overrides.
"""

import argparse
import json
import logging

import numpy as np

from shared.audio import load_wav, save_wav
from shared.params import ParamType
from specsyn.analysis.analyze import analyze, select_segment
from specsyn.engine.adjust import build_synthesizer_parms
from specsyn.engine.params import STATE_SCHEMA
from specsyn.engine.synth import compute_average_f0, synthesize
from specsyn.state.app_state import (
    CURVE_SLOTS,
    AppState,
    decode_app_state_url_parms_or_default,
    encode_app_state_url_parms,
)
from specsyn.state.codec import decode_curve
from specsyn.state.curves import Curve

log = logging.getLogger(__name__)


def load_preset(path) -> dict:
    with open(path) as f:
        preset = json.load(f)
    preset.pop("_meta", None)
    return preset


def apply_preset(state: AppState, preset: dict) -> AppState:
    """Apply a preset dict: scalar controls by URL key or attribute name, curves
    as [[x, y], ...] lists or encoded curve strings. Analysis settings go under
    "analysis" and are ignored here."""
    changes = STATE_SCHEMA.validate_and_clamp(
        {k: v for k, v in preset.items() if k != "analysis"})
    for slot in CURVE_SLOTS:
        value = preset.get(slot.key, preset.get(slot.attr))
        if value is None:
            continue
        if isinstance(value, str):
            changes[slot.attr] = decode_curve(value, slot.x_type, slot.y_type)
        else:
            changes[slot.attr] = Curve.from_pairs(value, sort=True)
    return state.replace(**changes)


def main(argv=None):
    parser = argparse.ArgumentParser(description="SpecSyn offline renderer")
    parser.add_argument("output", help="Output WAV file")
    parser.add_argument("--state", default="",
                        help="URL state string (the part after '#')")
    parser.add_argument("--preset", help="Preset JSON file")
    parser.add_argument("--analyze", metavar="INPUT",
                        help="Input WAV file to derive the curves from")
    parser.add_argument("--f0", type=float,
                        help="Reference f0 [Hz] for the analysis (default: estimate)")
    parser.add_argument("--start", type=float, help="Analysis segment start [s]")
    parser.add_argument("--end", type=float, help="Analysis segment end [s]")
    for p in STATE_SCHEMA:
        if p.type not in (ParamType.INT, ParamType.FLOAT):
            continue
        lo, hi = p.range
        parser.add_argument(f"--{p.attr}", type=int if p.type == ParamType.INT else float,
                            help=f"{p.key}, {lo:g} to {hi:g} {p.unit}".rstrip())
    parser.add_argument("--print-state", action="store_true",
                        help="Print the URL state string of the rendered sound")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(name)s %(levelname)s: %(message)s")

    state = decode_app_state_url_parms_or_default(args.state)

    analysis_params = {}
    if args.preset:
        preset = load_preset(args.preset)
        state = apply_preset(state, preset)
        analysis_params.update(preset.get("analysis", {}))

    if args.analyze:
        audio, sr = load_wav(args.analyze)
        print(f"Loaded {args.analyze}: {len(audio)} samples, {sr} Hz")
        audio = select_segment(audio, sr, args.start, args.end)
        if args.f0 is not None:
            analysis_params["f0_reference"] = args.f0
        result = analyze(audio, sr, analysis_params)
        state = result.apply_to(state)

    overrides = {p.attr: getattr(args, p.attr) for p in STATE_SCHEMA
                 if getattr(args, p.attr, None) is not None}
    if overrides:
        state = state.replace(**STATE_SCHEMA.validate_and_clamp(overrides))

    parms = build_synthesizer_parms(state)
    signal = synthesize(parms)
    average_f0 = compute_average_f0(parms)
    if np.isfinite(average_f0):
        log.info("average f0 %.0f Hz", average_f0)
    save_wav(args.output, signal, state.sample_rate)
    print(f"Saved {args.output}: {len(signal)} samples, {state.sample_rate:g} Hz")

    if args.print_state:
        print("#" + encode_app_state_url_parms(state))


if __name__ == "__main__":
    main()
