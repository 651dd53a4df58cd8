"""
semroute: Semantic Intent Router

Decides which predefined route (intent category) a free-text query belongs
to by comparing its embedding against embeddings of example utterances,
replacing slow generative intent classification with a fast vector lookup.
"""

__version__ = "0.1.0"
