from __future__ import annotations

import logging
import sys
import wave
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Optional

import numpy as np

try:
    import winsound
except ImportError:  # pragma: no cover - non-Windows fallback
    winsound = None  # type: ignore

try:  # Optional PortAudio playback on Linux/macOS
    import pyaudio
except ImportError:  # pragma: no cover - optional
    pyaudio = None  # type: ignore

try:  # Optional local TTS for spoken alarm names
    import pyttsx3
except ImportError:  # pragma: no cover - optional
    pyttsx3 = None  # type: ignore

logger = logging.getLogger(__name__)

SAMPLE_RATE = 24000
TONE_HZ = 880.0


def render_tone(duration_seconds: float = 0.5, freq: float = TONE_HZ, amplitude: float = 0.4) -> bytes:
    """Mono int16 sine burst with a short fade so loops do not click."""
    samples = int(duration_seconds * SAMPLE_RATE)
    t = np.arange(samples) / SAMPLE_RATE
    wave_data = amplitude * np.sin(2 * np.pi * freq * t)
    fade = min(samples // 10, int(0.01 * SAMPLE_RATE))
    if fade:
        ramp = np.linspace(0.0, 1.0, fade)
        wave_data[:fade] *= ramp
        wave_data[-fade:] *= ramp[::-1]
    return (wave_data * 32767).astype(np.int16).tobytes()


def ensure_alarm_sound(path: Path, duration_seconds: float = 0.5) -> None:
    if path.exists():
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "w") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(SAMPLE_RATE)
        wav.writeframes(render_tone(duration_seconds))
    logger.info("Generated default alarm sound at %s", path)


class AlarmSoundPlayer:
    def __init__(self, sound_path: Path, enabled: bool = True):
        self.sound_path = sound_path
        self.enabled = enabled
        self._stop_event = Event()
        self._beep_thread: Optional[Thread] = None

    def start_loop(self) -> None:
        if not self.enabled:
            return
        self._stop_event.clear()
        try:
            ensure_alarm_sound(self.sound_path)
        except OSError as exc:
            logger.warning("Could not write alarm sound %s: %s", self.sound_path, exc)
        if winsound and self.sound_path.exists():
            try:
                winsound.PlaySound(
                    str(self.sound_path),
                    winsound.SND_FILENAME | winsound.SND_LOOP | winsound.SND_ASYNC,
                )
                return
            except RuntimeError:
                logger.warning("winsound.PlaySound failed, falling back to beep loop")

        if self._beep_thread and self._beep_thread.is_alive():
            return
        self._beep_thread = Thread(target=self._beep_loop, name="alarm-beep", daemon=True)
        self._beep_thread.start()

    def stop_loop(self) -> None:
        self._stop_event.set()
        if winsound:
            try:
                winsound.PlaySound(None, winsound.SND_PURGE)
            except RuntimeError:
                logger.debug("winsound.PlaySound purge failed")
        if self._beep_thread:
            self._beep_thread.join(timeout=2)
            self._beep_thread = None

    def _beep_loop(self) -> None:  # pragma: no cover - timing loop
        pa, stream = self._open_stream()
        tone = render_tone()
        try:
            while not self._stop_event.is_set():
                if stream is not None:
                    stream.write(tone)
                else:
                    sys.stderr.write("\a")
                    sys.stderr.flush()
                self._stop_event.wait(0.75)
        finally:
            if stream is not None:
                stream.stop_stream()
                stream.close()
            if pa is not None:
                pa.terminate()

    def _open_stream(self):  # pragma: no cover - device dependent
        if not pyaudio:
            return None, None
        pa = pyaudio.PyAudio()
        try:
            return pa, pa.open(format=pyaudio.paInt16, channels=1, rate=SAMPLE_RATE, output=True)
        except OSError as exc:
            logger.warning("PyAudio output unavailable (%s), using terminal bell", exc)
            pa.terminate()
            return None, None


def _init_tts_engine(rate: int):
    if not pyttsx3:
        return None
    try:
        engine = pyttsx3.init()
        engine.setProperty("rate", rate)
    except Exception as exc:  # pragma: no cover - missing espeak/SAPI driver
        logger.warning("pyttsx3 unavailable: %s", exc)
        return None
    return engine


class LocalSpeaker:
    """Announces ringing alarms by name through an offline TTS engine.

    Announcements run one at a time on a daemon thread so the clock loop is
    never blocked by speech.
    """

    def __init__(self, rate: int = 185, engine=None):
        self._engine = engine if engine is not None else _init_tts_engine(rate)
        self._lock = Lock()

    @property
    def available(self) -> bool:
        return self._engine is not None

    @staticmethod
    def phrase(name: str) -> str:
        name = (name or "").strip()
        return f"Alarm: {name}" if name else "Alarm"

    def announce(self, name: str) -> Optional[Thread]:
        if not self._engine:
            return None
        text = self.phrase(name)
        worker = Thread(target=self._speak, args=(text,), name="alarm-speech", daemon=True)
        worker.start()
        return worker

    def _speak(self, text: str) -> None:
        with self._lock:
            try:
                self._engine.say(text)
                self._engine.runAndWait()
            except Exception:  # pragma: no cover - engine runtime errors
                logger.error("TTS engine failed to speak %r", text, exc_info=True)
