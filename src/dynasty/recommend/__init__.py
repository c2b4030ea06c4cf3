from .generator import Recommendation, balance_offer, generate, generate_recommendations

__all__ = ["Recommendation", "balance_offer", "generate", "generate_recommendations"]
