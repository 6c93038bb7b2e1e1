"""Audio I/O utilities.

Provides load_wav and save_wav used by the render CLI.
"""

import numpy as np
from scipy.io import wavfile


def load_wav(path):
    """Load a WAV file as float64 at its own sample rate.

    Only the first channel of a multi-channel file is used.
    Returns (audio_array, sample_rate).
    """
    sr, data = wavfile.read(path)
    if data.dtype == np.int16:
        audio = data.astype(np.float64) / 32768.0
    elif data.dtype == np.int32:
        audio = data.astype(np.float64) / 2147483648.0
    elif data.dtype == np.uint8:
        audio = (data.astype(np.float64) - 128.0) / 128.0
    else:
        audio = data.astype(np.float64)
    if audio.ndim == 2:
        audio = audio[:, 0]
    return audio, sr


def save_wav(path, audio, sr=44100, normalize=False):
    """Save audio to a 16-bit WAV file.

    With normalize=True the peak is scaled to 0.95, otherwise samples
    outside [-1, 1] are clipped.
    """
    audio = np.asarray(audio, dtype=np.float64)
    peak = np.max(np.abs(audio)) if len(audio) else 0.0
    if normalize and peak > 0:
        audio = audio / peak * 0.95
    out = (np.clip(audio, -1.0, 1.0) * 32767).astype(np.int16)
    wavfile.write(path, int(sr), out)
