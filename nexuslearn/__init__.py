"""NexusLearn backend: study-tool flows and the PDF-to-podcast pipeline."""
