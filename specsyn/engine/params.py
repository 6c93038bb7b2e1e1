"""Parameter schema and constants for SpecSyn.

This is the shared contract between the URL state, preset files, the render
CLI and the engine. Scalar controls of the application state and the analysis
settings are defined declaratively with ParamDef; the keys are the names used
in URL fragments and preset JSON.
"""

from shared.params import ParamType as T, ParamDef, ParamSchema

SR = 44100

# Synthesis
MIN_F0 = 25.0                 # f0 at or below this is unvoiced (silence)
NYQUIST_GUARD_HZ = 1000.0     # harmonics stay this far below Nyquist
MIN_DB = -200.0               # dB values below this are treated as silence
AGC_CLIP_LEVEL = 0.99         # peak level used when the AGC target would clip
AVERAGE_F0_STEP = 0.005       # sampling step [s] for the average f0
AVERAGE_F0_DB_RANGE = (-30.0, 30.0)
RENDER_BLOCK_SIZE = 1024      # samples evaluated per vectorized block

# Spectral distribution overlay
DISTRIB_MAX_FREQ = 5500.0
DISTRIB_RES = 500
DISTRIB_STEP = 0.005

DEFAULT_DURATION = 1.0        # used when a time curve has no knots

# ── Default curves (x, y) ─────────────────────────────────────────────

DEFAULT_SPECTRUM_KNOTS = [(70, -62), (1100, -25), (2600, -68), (4200, -40), (5500, -71)]
DEFAULT_AMPLITUDE_KNOTS = [(0, -50), (0.15, -27), (0.4, -10), (1, -5), (2, -5),
                           (2.7, -12), (2.9, -30), (3, -50)]
DEFAULT_FREQUENCY_KNOTS = [(0, 200), (1.5, 600), (3, 200)]

# ── State schema ──────────────────────────────────────────────────────

_STATE_PARAMS = [
    ParamDef("sampleRate", T.INT, section="output", attr="sample_rate",
             default=SR, range=(8000, 192000), unit="Hz"),

    ParamDef("agcRmsLevel", T.FLOAT, section="output", attr="agc_rms_level",
             default=0.18, range=(0.0, 1.0)),

    ParamDef("f0Multiplier", T.FLOAT, section="adjust", attr="f0_multiplier",
             default=1.0, range=(0.01, 100.0)),

    ParamDef("specMultiplier", T.FLOAT, section="adjust", attr="spec_multiplier",
             default=1.0, range=(0.01, 100.0)),

    ParamDef("specShift", T.FLOAT, section="adjust", attr="spec_shift",
             default=0.0, range=(-20000.0, 20000.0), unit="Hz"),

    ParamDef("evenAmplShift", T.FLOAT, section="adjust", attr="even_ampl_shift",
             default=0.0, range=(-100.0, 100.0), unit="dB"),

    ParamDef("ref", T.STR, section="info", attr="reference",
             default=""),
]

STATE_SCHEMA = ParamSchema(_STATE_PARAMS)

# ── Analysis schema ───────────────────────────────────────────────────

SMOOTHING_METHODS = ["smaPwrLog2", "firLpPwrLog"]
WINDOW_FUNCTIONS = ["rect", "triangular", "hann", "hamming", "blackman",
                    "blackmanHarris", "nuttall", "flatTop", "parabolic"]

_ANALYSIS_PARAMS = [
    ParamDef("f0Reference", T.FLOAT, section="analysis", attr="f0_reference",
             default=0.0, range=(0.0, 5000.0), unit="Hz",
             label="0 = estimate from the signal"),

    ParamDef("analSpecEnabled", T.BOOL, section="spectrum", attr="spec_enabled",
             default=True),

    ParamDef("analSpecMethod", T.CHOICE, section="spectrum", attr="spec_method",
             default="smaPwrLog2", choices=SMOOTHING_METHODS),

    ParamDef("analSpecWidth1", T.FLOAT, section="spectrum", attr="spec_width1",
             default=1.0, range=(0.01, 100.0), label="relative to f0Reference"),

    ParamDef("analSpecFunc1", T.CHOICE, section="spectrum", attr="spec_func1",
             default="parabolic", choices=WINDOW_FUNCTIONS + ["none"]),

    ParamDef("analSpecWidth2", T.FLOAT, section="spectrum", attr="spec_width2",
             default=1.5, range=(0.01, 100.0), label="relative to f0Reference"),

    ParamDef("analSpecFunc2", T.CHOICE, section="spectrum", attr="spec_func2",
             default="parabolic", choices=WINDOW_FUNCTIONS + ["none"]),

    ParamDef("analSpecMaxFreq", T.FLOAT, section="spectrum", attr="spec_max_freq",
             default=5500.0, range=(100.0, 96000.0), unit="Hz"),

    ParamDef("analSpecStepWidth", T.FLOAT, section="spectrum", attr="spec_step_width",
             default=50.0, range=(1.0, 5000.0), unit="Hz"),

    ParamDef("analSpecWindowFunc", T.CHOICE, section="spectrum", attr="spec_window_func",
             default="hann", choices=WINDOW_FUNCTIONS),

    ParamDef("analAmplEnabled", T.BOOL, section="amplitude", attr="ampl_enabled",
             default=True),

    ParamDef("analAmplStepWidth", T.FLOAT, section="amplitude", attr="ampl_step_width",
             default=0.025, range=(0.001, 10.0), unit="s"),

    ParamDef("analFreqEnabled", T.BOOL, section="frequency", attr="freq_enabled",
             default=True),

    ParamDef("analFreqStepWidth", T.FLOAT, section="frequency", attr="freq_step_width",
             default=0.025, range=(0.001, 10.0), unit="s"),
]

ANALYSIS_SCHEMA = ParamSchema(_ANALYSIS_PARAMS)

default_state_params = STATE_SCHEMA.default_params
default_analysis_params = ANALYSIS_SCHEMA.default_params
