"""
Application Layer - Use Cases

Contains:
- search: Multi-source search, relevance ranking, trending sampling
- analysis: README-grounded project analysis
"""
