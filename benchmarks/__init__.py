"""
Benchmark suite for stepjson parsing performance.

Compares stepjson against standard JSON libraries including:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures whole-document parsing speed, step-wise event streaming and the
memory held while streaming large documents.
"""
