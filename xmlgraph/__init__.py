"""
xmlgraph: XML corpus to relational element graph.

Phase one extracts every element carrying an ``id`` attribute into documents,
nodes and typed properties. Phase two runs pluggable relationship adapters
over the committed model and appends a directed, confidence-scored edge graph.
"""

__version__ = "0.1.0"
