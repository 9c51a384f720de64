from .speech import AudioGenerationError, PodcastSpeechSynthesizer
from .wav import concat_pcm, pcm_duration_seconds, pcm_to_wav

__all__ = [
    "AudioGenerationError",
    "PodcastSpeechSynthesizer",
    "concat_pcm",
    "pcm_duration_seconds",
    "pcm_to_wav",
]
