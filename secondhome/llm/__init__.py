"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send chat completions to Groq and return the raw text reply.
- Recover JSON objects from model output, tolerating stray prose.
"""
