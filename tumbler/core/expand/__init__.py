"""Combinatorial expansion engine.

Providers describe one tree level each; the Expander walks their
cross-product depth-first and hands every leaf to a consumer.
"""
