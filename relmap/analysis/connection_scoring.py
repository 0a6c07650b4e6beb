"""
Connection Scoring Module
=========================

Heuristic strength assessment for relationships.

Scoring Factors:
- Category base value (account ownership > hierarchy > contact > related)
- Activity (an inactive endpoint weakens the link)
- Data completeness (shared email / phone strengthen it)

Output:
- strength: float in [0, 1]

Design Decisions:
-----------------
1. Scoring is deterministic and reproducible
2. Weights are configurable (ScoringConfig) for different deployments
3. The scorer never touches the graph or the data source
"""

from ..config import ScoringConfig
from ..model.schemas import ConnectionCategory


class ConnectionScorer:
    """Calculates connection strength for a relationship.

    Usage:
        scorer = ConnectionScorer()
        strength = scorer.score(ConnectionCategory.CONTACT_OF,
                                from_active=True, to_active=True,
                                from_has_email=True, to_has_email=True)

        # Or straight from two entities / nodes
        strength = scorer.score_entities(ConnectionCategory.RESPONSIBLE_FOR, employee, company)
    """

    def __init__(self, config: ScoringConfig = None):
        """Initialize the scorer.

        Args:
            config: Scoring weights (defaults if None)
        """
        self.config = config or ScoringConfig()

    def base_strength(self, category: ConnectionCategory) -> float:
        """Starting strength for a category."""
        return self.config.base_strengths.get(category.value, self.config.default_strength)

    def score(
        self,
        category: ConnectionCategory,
        from_active: bool = True,
        to_active: bool = True,
        from_has_email: bool = False,
        to_has_email: bool = False,
        from_has_phone: bool = False,
        to_has_phone: bool = False
    ) -> float:
        """Score a connection.

        Returns:
            Strength clamped to [0, 1]
        """
        strength = self.base_strength(category)

        if not from_active or not to_active:
            strength *= self.config.inactive_penalty

        if from_has_email and to_has_email:
            strength += self.config.email_bonus
        if from_has_phone and to_has_phone:
            strength += self.config.phone_bonus

        return round(min(max(strength, 0.0), 1.0), 4)

    def score_entities(self, category: ConnectionCategory, from_entity, to_entity) -> float:
        """Score a connection between two entities or nodes."""
        return self.score(
            category,
            from_active=from_entity.active,
            to_active=to_entity.active,
            from_has_email=from_entity.has_email,
            to_has_email=to_entity.has_email,
            from_has_phone=from_entity.has_phone,
            to_has_phone=to_entity.has_phone,
        )
