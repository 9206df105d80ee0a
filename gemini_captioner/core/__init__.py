"""Core normalization modules.

WHY: The core package turns raw model output into the stable IR that
every formatter consumes. It has no knowledge of HTTP or files.

HOW: ir.py defines the data structures, timestamps.py parses and
formats individual timestamps, extractor.py builds cues from a whole
response payload.

RULES:
- IR dataclasses are the contract — change with care
- Nothing here raises for malformed model output
"""
