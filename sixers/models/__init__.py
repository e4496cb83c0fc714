from sixers.models.competition import Tournament, Season, Team
from sixers.models.player import Player, PlayerSeasonInfo, PlayerPerformance
from sixers.models.match import Match, BallEvent
from sixers.models.league import League, ScoringRule
from sixers.models.fantasy import FantasyTeam, FantasyTeamInstance, FantasyMatchup

__all__ = [
    "Tournament",
    "Season",
    "Team",
    "Player",
    "PlayerSeasonInfo",
    "PlayerPerformance",
    "Match",
    "BallEvent",
    "League",
    "ScoringRule",
    "FantasyTeam",
    "FantasyTeamInstance",
    "FantasyMatchup",
]
