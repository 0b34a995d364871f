"""
Category resolution pipeline: rules, cache, LLM classifier and the
orchestrator that chains them.
"""
