import logging
import os

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

from workpulse.config import AMBIENT_AUDIO_PATH, AMBIENT_VOLUME

logger = logging.getLogger(__name__)


class AmbientAudio:
    """Looping background noise (pink noise by default) played through pygame.mixer.

    A missing sound file or an unusable audio device only disables playback.
    """

    def __init__(self, path: str = AMBIENT_AUDIO_PATH, volume: float = AMBIENT_VOLUME):
        self.path = path
        self._volume = _clamp(volume)
        self._loaded = False
        self._started = False
        self.is_playing = False

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = _clamp(value)
        if self._loaded:
            pygame.mixer.music.set_volume(self._volume)

    def play(self) -> None:
        if self.is_playing:
            return
        if not self._loaded and not self._load():
            return
        if self._started:
            pygame.mixer.music.unpause()
        else:
            pygame.mixer.music.play(loops=-1)
            self._started = True
        self.is_playing = True

    def pause(self) -> None:
        if self._loaded and self.is_playing:
            pygame.mixer.music.pause()
        self.is_playing = False

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def _load(self) -> bool:
        if not os.path.exists(self.path):
            logger.warning("Ambient audio file not found at %s, playback disabled", self.path)
            return False
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            pygame.mixer.music.load(self.path)
            pygame.mixer.music.set_volume(self._volume)
        except pygame.error as e:
            logger.warning("Could not initialise ambient audio: %s", e)
            return False
        self._loaded = True
        return True


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))
