from sixers.engine.lifecycle import MatchLifecycleManager
from sixers.engine.ball_events import BallEventProcessor, Delivery
from sixers.engine.rules import ScoringRuleResolver, RuleSet
from sixers.engine.resolution import RosterResolver
from sixers.engine.matchups import MatchupAggregator
from sixers.engine.roster import RosterMutationGuard

__all__ = [
    "MatchLifecycleManager",
    "BallEventProcessor",
    "Delivery",
    "ScoringRuleResolver",
    "RuleSet",
    "RosterResolver",
    "MatchupAggregator",
    "RosterMutationGuard",
]
