"""TikTok video transcription HTTP service (AssemblyAI backed)."""
