"""Memory backends: markdown local store + lucid distributed fallback.

Layout:
    ~/.lucidmem/memory/
    ├── entries/
    │   └── <key>.md                   # One entry per key, YAML frontmatter + body
    └── .versions/                     # Timestamped backups (10 per entry)

``LucidMemory`` wraps the markdown store and consults the ``lucid`` binary
when local recall is thin. Both implement the ``Memory`` protocol.
"""
