"""Purity contract: forbidden tables, member matching and the analyzer."""

from puregate.kernel.purity.analyzer import PurityAnalyzer, analyze_purity
from puregate.kernel.purity.matching import PatternSet, member_path

__all__ = ["PatternSet", "PurityAnalyzer", "analyze_purity", "member_path"]
