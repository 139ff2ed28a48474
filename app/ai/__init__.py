"""
Ship or Sink: Change
AI module.

Submodules:
    - gateway: LLM Gateway (provider routing, usage logging)
    - context_builder: cross-project context for the change coach
    - starter_parser: numbered conversation-starter parsing and tagging
    - assistants: conversation starters, change coach chat
"""
