"""
Domain layer containing the stream substitution logic.

Submodules:
- stream: Session persistence, history, search resolution, sync and lifecycle.
"""
