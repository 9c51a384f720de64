"""HTTP routers for the NexusLearn API."""
