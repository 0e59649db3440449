"""
stakegraph — opposition-aware processing of staked positions over a
decentralized knowledge graph.

Subpackages:
- core/        : domain models, exact share arithmetic, envelope contracts
- pipeline/    : Normalizer → Classifier → Ranker → Shaper
- operations/  : call sites over an injected graph data source
"""

__version__ = "0.1.0"
