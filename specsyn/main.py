#!/usr/bin/env python3
"""SpecSyn: spectral harmonic synthesizer.

Subcommands:
    render   synthesize a WAV file (see specsyn.audio.render)
    state    decode a URL state string and print it as JSON
    distrib  print the spectral energy distribution of a URL state
"""

import argparse
import json
import logging
import sys

import numpy as np

from specsyn.engine.adjust import build_distrib_parms, build_synthesizer_parms
from specsyn.engine.distrib import compute_distrib
from specsyn.engine.params import STATE_SCHEMA
from specsyn.engine.synth import compute_average_f0
from specsyn.errors import StateDecodeError
from specsyn.state.app_state import CURVE_SLOTS, decode_app_state_url_parms

log = logging.getLogger(__name__)


def state_to_dict(state) -> dict:
    d = {p.key: getattr(state, p.attr) for p in STATE_SCHEMA}
    for slot in CURVE_SLOTS:
        d[slot.key] = [list(pt) for pt in getattr(state, slot.attr).to_pairs()]
    return d


def _state_cmd(args):
    state = decode_app_state_url_parms(args.state)
    d = state_to_dict(state)
    average_f0 = compute_average_f0(build_synthesizer_parms(state))
    d["_meta"] = {"averageF0": average_f0 if np.isfinite(average_f0) else None}
    print(json.dumps(d, indent=2))


def _distrib_cmd(args):
    state = decode_app_state_url_parms(args.state)
    dp = build_distrib_parms(state, distrib_res=args.res)
    dist = compute_distrib(dp)
    if len(dist) == 0:
        return
    d = dp.distrib_max_freq / len(dist)
    for i, v in enumerate(dist):
        if np.isfinite(v) and v >= args.floor:
            print(f"{i * d:8.1f} {v:7.1f}")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "render":
        from specsyn.audio.render import main as render_main
        return render_main(argv[1:])

    parser = argparse.ArgumentParser(description="SpecSyn")
    sub = parser.add_subparsers(dest="command", required=True)
    p = sub.add_parser("state", help="Decode a URL state string")
    p.add_argument("state")
    p = sub.add_parser("distrib", help="Spectral energy distribution of a URL state")
    p.add_argument("state")
    p.add_argument("--res", type=int, default=100)
    p.add_argument("--floor", type=float, default=-60.0, help="Lowest dB value shown")
    sub.add_parser("render", help="Synthesize a WAV file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s: %(message)s")
    try:
        if args.command == "state":
            _state_cmd(args)
        elif args.command == "distrib":
            _distrib_cmd(args)
    except StateDecodeError as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
