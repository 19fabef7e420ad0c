"""Context assembly for the guide's prompts.

Provides:
- build_context_prompt: memory sections appended to the system prompt
- looks_like_decision: keyword heuristic for life-decision statements
"""
