"""
Evidence-Coverage & Strategy Engine
===================================

Deterministic case-bundle analysis for UK litigation:
1. Per-category evidence coverage with an audit trail
2. Completeness scoring and analysis admission
3. Probability gating
4. Strategy angles, loopholes and nuclear options from a closed catalogue
5. A cached, redacted generative fallback when the catalogue finds nothing

The HTTP surface (api.py) and the snapshot composer are thin layers over
pipeline.py.
"""

__version__ = "1.0.0"
