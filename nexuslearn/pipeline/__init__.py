"""Processing pipelines for NexusLearn jobs."""
