"""
Tests for the points calculator. No database: rules are built straight
from the default table.
"""
import pytest

from sixers.engine.points import (
    NumericBand, Rule, StatLine, score, find_multiplier, band_points,
    CAPTAIN_STAT, VICE_CAPTAIN_STAT,
)
from sixers.engine.rules import DEFAULT_RULES


def default_rules():
    rules = []
    for stat, category, mode, per_unit, flat, threshold, band, multiplier in DEFAULT_RULES:
        rules.append(Rule(
            stat=stat,
            category=category,
            mode=mode,
            per_unit_points=per_unit,
            flat_points=flat,
            threshold=threshold,
            band=NumericBand.parse(band) if band else None,
            multiplier=multiplier,
        ))
    return rules


class TestBattingPoints:
    """Runs, boundaries, milestones, duck and strike rate"""

    def test_fifty_five_off_forty(self):
        # 55 runs + 8 half-century + 4 for strike rate 137.5
        stats = StatLine(runs_scored=55, balls_faced=40)
        assert score(stats, default_rules()).total == 67

    def test_captain_doubles(self):
        stats = StatLine(runs_scored=55, balls_faced=40)
        assert score(stats, default_rules(), is_captain=True).total == 134

    def test_vice_captain_multiplier(self):
        stats = StatLine(runs_scored=55, balls_faced=40)
        assert score(stats, default_rules(), is_vice_captain=True).total == pytest.approx(100.5)

    def test_boundaries_add_bonus(self):
        # 20 runs + 2 fours + 2*2 sixes, strike rate 200
        stats = StatLine(runs_scored=20, balls_faced=10, fours=2, sixes=2)
        result = score(stats, default_rules())
        assert result.breakdown["Bonus per 4"] == 2
        assert result.breakdown["Bonus per 6"] == 4
        assert result.total == 20 + 2 + 4 + 6

    def test_century_also_earns_half_century(self):
        stats = StatLine(runs_scored=100, balls_faced=60)
        result = score(stats, default_rules())
        assert result.breakdown["Bonus per half-century"] == 8
        assert result.breakdown["Bonus per century"] == 8
        assert result.total == 100 + 8 + 8 + 6

    def test_duck_requires_a_ball_faced(self):
        # duck -2, strike rate 0 is in [0,30] for -6
        batted = StatLine(runs_scored=0, balls_faced=3)
        assert score(batted, default_rules()).total == -8

        did_not_bat = StatLine()
        assert score(did_not_bat, default_rules()).total == 0

    def test_strike_rate_band_edges(self):
        rules = [r for r in default_rules() if r.stat == "Strike Rate"]
        # exactly 30 is in [0,30], not (30,40)
        assert score(StatLine(runs_scored=3, balls_faced=10), rules).total == -6
        # exactly 40 is in [40,50]
        assert score(StatLine(runs_scored=4, balls_faced=10), rules).total == -2
        # 60-100 is a neutral gap
        assert score(StatLine(runs_scored=8, balls_faced=10), rules).total == 0


class TestBowlingAndFielding:

    def test_wicket_bonuses_repeat_in_multiples(self):
        # 6 wickets: 150 + floor(6/3)*4 + floor(6/5)*5
        stats = StatLine(wickets_taken=6)
        result = score(stats, default_rules())
        assert result.breakdown["3-Wicket Bonus"] == 8
        assert result.breakdown["5-Wicket Bonus"] == 5
        assert result.total == 163

    @pytest.mark.parametrize("threshold", [0.5, 0, -3])
    def test_wicket_bonus_threshold_below_one_uses_default(self, threshold):
        rule = Rule(stat="3-Wicket Bonus", category="bowling", per_unit_points=4, threshold=threshold)
        assert score(StatLine(wickets_taken=2), [rule]).total == 0
        assert score(StatLine(wickets_taken=3), [rule]).total == 4

    def test_economy_band(self):
        # 10 runs off 24 balls = 2.5, upper edge of [0,2.5]
        stats = StatLine(runs_conceded=10, balls_bowled=24)
        assert score(stats, default_rules()).total == 6

        # 30 off 24 = 7.5
        stats = StatLine(runs_conceded=30, balls_bowled=24)
        assert score(stats, default_rules()).total == -2

    def test_no_economy_without_balls_bowled(self):
        rule = Rule(stat="Economy", category="bowling", mode="band", flat_points=6,
                    band=NumericBand(0, 2.5, "[]"))
        assert band_points(StatLine(), rule) == 0

    def test_fielding(self):
        # 3 catches 24 + bonus 4, a run out 12, a drop -2
        stats = StatLine(catches=3, run_outs=1, catches_dropped=1)
        assert score(stats, default_rules()).total == 38


class TestMultipliers:

    def test_leadership_rules_do_not_add_points(self):
        rules = [r for r in default_rules() if r.category == "leadership"]
        result = score(StatLine(runs_scored=10, balls_faced=10), rules, is_captain=True)
        assert result.base_points == 0
        assert result.multiplier == 2

    def test_missing_multiplier_defaults_to_one(self):
        rules = [r for r in default_rules() if r.stat != CAPTAIN_STAT]
        assert find_multiplier(rules, CAPTAIN_STAT) == 1.0
        assert find_multiplier(rules, VICE_CAPTAIN_STAT) == 1.5

        stats = StatLine(runs_scored=55, balls_faced=40)
        assert score(stats, rules, is_captain=True).total == 67


class TestNumericBand:

    def test_parse_and_format(self):
        band = NumericBand.parse("[120,140)")
        assert (band.lower, band.upper, band.bounds) == (120, 140, "[)")
        assert str(band) == "[120,140)"

    def test_unbounded_side(self):
        band = NumericBand.parse("(9,)")
        assert band.upper is None
        assert not band.contains(9)
        assert band.contains(9.01)
        assert band.contains(1000)

    def test_bound_flags(self):
        closed = NumericBand(2, 4, "[]")
        open_ = NumericBand(2, 4, "()")
        assert closed.contains(2) and closed.contains(4)
        assert not open_.contains(2) and not open_.contains(4)
        assert open_.contains(3)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            NumericBand.parse("120-140")
