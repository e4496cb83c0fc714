"""
Ball Event Processor - applies one delivery to a live match.

Every delivery is appended to the timeline and then applied through a
recipe: which counters move for the striker, the bowler, the fielder and
each side of the match. Recipes are data so that adding a dismissal kind
means adding a row, not another branch.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sixers.errors import ConflictError, InternalError, InvalidStateError, NotFoundError, ValidationError
from sixers.models.match import Match, MatchStatus, BallEvent, WicketType, ExtraType
from sixers.models.player import PlayerPerformance, PlayerSeasonInfo
from sixers.engine.lifecycle import authorize_match
from sixers.engine.snapshots import MatchSnapshot, build_match_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recipe:
    """Counter movements for one kind of delivery"""
    credit_runs: bool              # striker runs (and 4/6), bowler runs conceded, side score
    bowler_wicket: bool            # bowler.wickets_taken += 1
    fielder_counter: Optional[str]  # counter on the fielder's row, if any
    fielder_required: bool
    side_balls_one: bool           # batting side balls += 1 instead of balls_played
    bowling_side_wicket: bool


NO_WICKET = Recipe(
    credit_runs=True, bowler_wicket=False, fielder_counter=None,
    fielder_required=False, side_balls_one=False, bowling_side_wicket=False,
)

WICKET_RECIPES = {
    WicketType.CATCH: Recipe(
        credit_runs=False, bowler_wicket=True, fielder_counter="catches",
        fielder_required=True, side_balls_one=True, bowling_side_wicket=True,
    ),
    WicketType.BOWLED: Recipe(
        credit_runs=False, bowler_wicket=True, fielder_counter=None,
        fielder_required=False, side_balls_one=True, bowling_side_wicket=True,
    ),
    WicketType.LBW: Recipe(
        credit_runs=False, bowler_wicket=True, fielder_counter=None,
        fielder_required=False, side_balls_one=True, bowling_side_wicket=True,
    ),
    WicketType.HIT_WICKET: Recipe(
        credit_runs=False, bowler_wicket=True, fielder_counter=None,
        fielder_required=False, side_balls_one=True, bowling_side_wicket=True,
    ),
    # Stumping can happen off a wide, so the side takes balls_played
    WicketType.STUMPED: Recipe(
        credit_runs=False, bowler_wicket=True, fielder_counter="dismissals",
        fielder_required=False, side_balls_one=False, bowling_side_wicket=True,
    ),
    # Runs completed before a run out still count; the bowler gets no wicket
    WicketType.RUN_OUT: Recipe(
        credit_runs=True, bowler_wicket=False, fielder_counter="run_outs",
        fielder_required=True, side_balls_one=False, bowling_side_wicket=True,
    ),
}


@dataclass
class Delivery:
    """Validated input for one ball"""
    match_id: int
    batting_team_id: int
    striker_id: int
    bowler_id: int
    runs_scored: int = 0
    balls_played: int = 1
    non_striker_id: Optional[int] = None
    four: bool = False
    six: bool = False
    extra_type: Optional[ExtraType] = None
    wicket_taken: Optional[int] = None
    wicket_type: Optional[WicketType] = None
    fielder_id: Optional[int] = None
    dropped_by_id: Optional[int] = None
    ball_num: Optional[int] = None

    @property
    def recipe(self) -> Recipe:
        if self.wicket_taken is None:
            return NO_WICKET
        return WICKET_RECIPES[self.wicket_type]

    @classmethod
    def from_payload(cls, payload: dict) -> "Delivery":
        """Build from a request body, raising ValidationError on bad input"""
        for required in ("match_id", "batting_team"):
            if payload.get(required) is None:
                raise ValidationError("Missing match_id or batting_team id")
        for required in ("striker", "bowler"):
            if payload.get(required) is None:
                raise ValidationError(f"Field {required} is required and missing from message body")

        def _enum(enum_cls, key):
            value = payload.get(key)
            if value is None or isinstance(value, enum_cls):
                return value
            try:
                return enum_cls(str(value).upper())
            except ValueError:
                raise ValidationError(f"Unknown {key}: {value}")

        delivery = cls(
            match_id=payload["match_id"],
            batting_team_id=payload["batting_team"],
            striker_id=payload["striker"],
            bowler_id=payload["bowler"],
            runs_scored=payload.get("runs_scored") or 0,
            balls_played=1 if payload.get("balls_played") is None else payload["balls_played"],
            non_striker_id=payload.get("non_striker"),
            four=bool(payload.get("four")),
            six=bool(payload.get("six")),
            extra_type=_enum(ExtraType, "extra_type"),
            wicket_taken=payload.get("wicket_taken"),
            wicket_type=_enum(WicketType, "wicket_type"),
            fielder_id=payload.get("fielder"),
            dropped_by_id=payload.get("drop_catch"),
            ball_num=payload.get("ball_num"),
        )
        return delivery

    def validate(self):
        if self.runs_scored < 0:
            raise ValidationError("runs_scored cannot be negative")
        if self.balls_played not in (0, 1):
            raise ValidationError("balls_played must be 0 or 1")
        if self.four and self.six:
            raise ValidationError("A delivery cannot be both a four and a six")
        if self.wicket_taken is not None and self.wicket_type is None:
            raise ValidationError("wicket_type is required when a wicket is taken")
        if self.wicket_taken is None and self.wicket_type is not None:
            raise ValidationError("wicket_taken is required when wicket_type is given")
        if self.wicket_taken is not None and self.recipe.fielder_required and self.fielder_id is None:
            raise ValidationError(f"A fielder is required for {self.wicket_type.value}")
        # only a run out can dismiss the batter at the other end
        if (self.wicket_taken is not None and self.wicket_type != WicketType.RUN_OUT
                and self.wicket_taken != self.striker_id):
            raise ValidationError(f"{self.wicket_type.value} can only dismiss the striker")


class BallEventProcessor:
    """
    Applies deliveries to LIVE matches. One call is one transaction: the
    ball row, every performance counter and the match totals commit
    together or not at all.
    """

    def __init__(self, session: Session):
        self.session = session

    def _lock_match(self, match_id: int) -> Match:
        # Serialises concurrent events on the same match
        match = (
            self.session.query(Match)
            .filter(Match.id == match_id)
            .with_for_update()
            .one_or_none()
        )
        if match is None:
            raise NotFoundError("Match doesn't exist")
        return match

    def _performance(self, match: Match, player_id: int, team_id: int, label: str) -> PlayerPerformance:
        perf = (
            self.session.query(PlayerPerformance)
            .join(PlayerSeasonInfo, PlayerPerformance.player_season_id == PlayerSeasonInfo.id)
            .filter(
                PlayerSeasonInfo.player_id == player_id,
                PlayerPerformance.match_id == match.id,
            )
            .with_for_update()
            .one_or_none()
        )
        if perf is None:
            raise ValidationError(f"{label} {player_id} is not part of this match")
        if perf.team_id != team_id:
            raise ValidationError(f"{label} {player_id} does not play for the expected side")
        return perf

    def _next_ball_num(self, match_id: int) -> int:
        current = self.session.query(func.max(BallEvent.ball_num)).filter(
            BallEvent.match_id == match_id
        ).scalar()
        return (current or 0) + 1

    def add_event(
        self,
        match_id: int,
        requester_tournament_id: Optional[int],
        event: Union[Delivery, dict],
    ) -> MatchSnapshot:
        delivery = event if isinstance(event, Delivery) else Delivery.from_payload(event)
        delivery.validate()
        if delivery.match_id != match_id:
            raise ValidationError("Body match_id does not match the path")

        try:
            return self._apply(match_id, requester_tournament_id, delivery)
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("Ball was recorded concurrently, retry") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise InternalError("Could not record ball") from exc
        except Exception:
            self.session.rollback()
            raise

    def _apply(self, match_id: int, requester_tournament_id: Optional[int], delivery: Delivery) -> MatchSnapshot:
        match = self._lock_match(match_id)
        authorize_match(match, requester_tournament_id)
        if match.status != MatchStatus.LIVE:
            raise InvalidStateError("Cannot score a match that is not currently LIVE")

        batting_side = match.side_of(delivery.batting_team_id)
        if batting_side is None:
            raise ValidationError("Batting team is not playing in this match")
        bowling_team_id = match.opponent_of(delivery.batting_team_id)
        bowling_side = "away" if batting_side == "home" else "home"

        recipe = delivery.recipe

        # Resolve every row before touching any counter
        striker = self._performance(match, delivery.striker_id, delivery.batting_team_id, "Striker")
        bowler = self._performance(match, delivery.bowler_id, bowling_team_id, "Bowler")
        if delivery.non_striker_id is not None:
            self._performance(match, delivery.non_striker_id, delivery.batting_team_id, "Non-striker")
        fielder = None
        if recipe.fielder_counter and delivery.fielder_id is not None:
            fielder = self._performance(match, delivery.fielder_id, bowling_team_id, "Fielder")
        dropped_by = None
        if delivery.dropped_by_id is not None:
            dropped_by = self._performance(match, delivery.dropped_by_id, bowling_team_id, "Fielder")
        if delivery.wicket_taken is not None:
            self._performance(match, delivery.wicket_taken, delivery.batting_team_id, "Dismissed batter")

        ball_num = self._next_ball_num(match.id)
        if delivery.ball_num is not None and delivery.ball_num != ball_num:
            raise ConflictError(f"Expected ball {ball_num}, got {delivery.ball_num}")

        ball = BallEvent(
            match_id=match.id,
            ball_num=ball_num,
            batting_team_id=delivery.batting_team_id,
            striker_id=delivery.striker_id,
            non_striker_id=delivery.non_striker_id,
            bowler_id=delivery.bowler_id,
            runs_scored=delivery.runs_scored,
            balls_played=delivery.balls_played,
            four=delivery.four,
            six=delivery.six,
            extra_type=delivery.extra_type,
            wicket_taken=delivery.wicket_taken,
            wicket_type=delivery.wicket_type,
            fielder_id=delivery.fielder_id,
            dropped_by_id=delivery.dropped_by_id,
        )
        self.session.add(ball)

        runs = delivery.runs_scored if recipe.credit_runs else 0
        balls = delivery.balls_played

        # Striker
        striker.runs_scored += runs
        striker.balls_faced += balls
        if recipe.credit_runs:
            striker.fours += 1 if delivery.four else 0
            striker.sixes += 1 if delivery.six else 0

        # Bowler
        bowler.runs_conceded += runs
        bowler.balls_bowled += balls
        if recipe.bowler_wicket:
            bowler.wickets_taken += 1

        # Fielding
        if fielder is not None:
            setattr(fielder, recipe.fielder_counter, getattr(fielder, recipe.fielder_counter) + 1)
        if dropped_by is not None:
            dropped_by.catches_dropped += 1

        # Match totals
        _bump(match, f"{batting_side}_team_score", runs)
        _bump(match, f"{batting_side}_team_balls", 1 if recipe.side_balls_one else balls)
        if recipe.bowling_side_wicket:
            _bump(match, f"{bowling_side}_team_wickets", 1)

        self.session.commit()
        logger.info(
            "Match %s ball %s: %s run(s)%s",
            match.id, ball_num, delivery.runs_scored,
            f", {delivery.wicket_type.value}" if delivery.wicket_type else "",
        )
        return build_match_snapshot(self.session, match)


def _bump(match: Match, column: str, amount: int):
    setattr(match, column, (getattr(match, column) or 0) + amount)
