"""
Tests for scoring rule resolution: defaults, league overrides, band tables.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from sixers.errors import NotFoundError
from sixers.models.league import ScoringRule
from sixers.engine.rules import ScoringRuleResolver, DEFAULT_RULES, seed_default_rules


class TestDefaults:

    def test_global_rules_are_the_seeded_table(self, test_db, default_rules):
        rules = ScoringRuleResolver(test_db).resolve_rules(None)
        assert len(rules) == len(DEFAULT_RULES)
        assert rules.league_id is None
        assert rules.rule("Points per run").per_unit_points == 1

    def test_band_stats_keep_every_band_in_order(self, test_db, default_rules):
        rules = ScoringRuleResolver(test_db).resolve_rules(None)
        bands = rules.group("Strike Rate")
        assert len(bands) == 6
        assert [b.band.lower for b in bands] == [0, 30, 40, 100, 120, 140]

    def test_seeding_twice_is_a_no_op(self, test_db, default_rules):
        assert seed_default_rules(test_db) == 0
        assert test_db.query(ScoringRule).count() == len(DEFAULT_RULES)


class TestLeagueOverrides:

    def test_league_rule_replaces_default(self, test_db, league):
        test_db.add(ScoringRule(
            league_id=league.id, stat="Points per run", category="batting",
            mode="standard", per_unit_points=2,
        ))
        test_db.commit()

        rules = ScoringRuleResolver(test_db).resolve_rules(league.id)
        run_rules = rules.group("Points per run")
        assert len(run_rules) == 1
        assert run_rules[0].per_unit_points == 2
        assert run_rules[0].league_id == league.id

    def test_no_stat_appears_twice(self, test_db, league):
        test_db.add(ScoringRule(
            league_id=league.id, stat="Points per Wicket", category="bowling",
            mode="standard", per_unit_points=30,
        ))
        test_db.commit()

        rules = ScoringRuleResolver(test_db).resolve_rules(league.id)
        standard_stats = [r.stat for r in rules if not r.is_band]
        assert len(standard_stats) == len(set(standard_stats))
        assert len(rules) == len(DEFAULT_RULES)

    def test_league_band_table_replaces_default_table(self, test_db, league):
        test_db.add(ScoringRule(
            league_id=league.id, stat="Economy", category="bowling", mode="band",
            flat_points=10, band_lower=0, band_upper=6, band_bounds="[)",
        ))
        test_db.commit()

        rules = ScoringRuleResolver(test_db).resolve_rules(league.id)
        economy = rules.group("Economy")
        assert len(economy) == 1
        assert economy[0].flat_points == 10
        # untouched band stat still uses the defaults
        assert len(rules.group("Strike Rate")) == 6

    def test_unset_stats_fall_back_to_defaults(self, test_db, league):
        rules = ScoringRuleResolver(test_db).resolve_rules(league.id)
        assert rules.league_id == league.id
        assert all(r.league_id is None for r in rules)

    def test_league_rules_only_returns_league_rows(self, test_db, league):
        test_db.add(ScoringRule(
            league_id=league.id, stat="Run Out", category="fielding",
            mode="standard", per_unit_points=6,
        ))
        test_db.commit()

        own = ScoringRuleResolver(test_db).league_rules(league.id)
        assert own.stats() == ["Run Out"]

    def test_unknown_league(self, test_db, default_rules):
        with pytest.raises(NotFoundError):
            ScoringRuleResolver(test_db).resolve_rules(999)


class TestUniqueness:

    def test_duplicate_global_standard_rule(self, test_db):
        for _ in range(2):
            test_db.add(ScoringRule(league_id=None, stat="Points per run", category="batting", mode="standard"))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()
        assert test_db.query(ScoringRule).count() == 0

    def test_duplicate_league_standard_rule(self, test_db, league):
        test_db.add(ScoringRule(league_id=league.id, stat="Run Out", category="fielding", per_unit_points=6))
        test_db.commit()
        test_db.add(ScoringRule(league_id=league.id, stat="Run Out", category="fielding", per_unit_points=10))
        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_duplicate_open_ended_band(self, test_db):
        for points in (6, 8):
            test_db.add(ScoringRule(
                stat="Strike Rate", category="batting", mode="band",
                flat_points=points, band_lower=140, band_upper=None,
            ))
        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_same_stat_in_league_and_defaults(self, test_db, league):
        test_db.add(ScoringRule(league_id=league.id, stat="Points per run", category="batting", per_unit_points=2))
        test_db.commit()
        assert test_db.query(ScoringRule).filter(ScoringRule.stat == "Points per run").count() == 2

    def test_distinct_bands_for_one_stat(self, test_db, default_rules):
        assert test_db.query(ScoringRule).filter(ScoringRule.stat == "Economy").count() == 6
