from .coordinator import run_podcast_job

__all__ = ["run_podcast_job"]
