"""Weekly resource generation.

Modules:
- prompts: Prompt file loading and curator preamble
- json_utils: JSON extraction and repair for model output
- generator: Anthropic/OpenAI calls with retry
"""
