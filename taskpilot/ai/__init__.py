"""
AI Module - classification of natural-language requests.

Module Structure:
================
- providers/: Remote transports (OpenAI primary, Ollama secondary)
- intent/: Label set, keyword fallback and the fallback classifier chain
- prompts/: System prompt shared by the remote providers
- monitoring/: Structured JSON logging of attempts and results

Flow:
=====
1. User: "book a 30-minute team meeting Friday at 14:30 in meeting room B"
2. OpenAI (or Ollama, or the keyword rules) labels it room.reserve
3. The normalizer reads the slots; the router books the room
"""

__version__ = "0.1.0"
