"""
Infrastructure Layer - External Service Access

Contains:
- sources: Registry search clients and README retrieval
- ai: Streaming chat providers and the chat worker
- storage: Local preference store
"""
