"""Concrete backends for the resolver and the transcription job client."""
