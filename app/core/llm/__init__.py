"""Provider (OpenAI) client wiring.

The SDK client is built once per process from settings and shared by all
requests; it holds no per-call state. Prompts and outputs are never logged here.
"""
