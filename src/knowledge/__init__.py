from .lookup import lookup, build_initial_prompt

__all__ = ["build_initial_prompt", "lookup"]
