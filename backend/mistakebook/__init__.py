"""
Mistake Book Backend: Application Package
==========================================

What: Appends study "mistake entries" to per-subject Markdown books kept in a
      Gitee repository, and reports per-book statistics.

Layers:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (push / stats workflow)  │  ← validation, orchestration
    ├─────────────────────────────────────┤
    │    Formatter + Retry (pure logic)   │  ← Markdown rendering, backoff
    ├─────────────────────────────────────┤
    │      FileStore (remote content)     │  ← Gitee contents API / in-memory
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
